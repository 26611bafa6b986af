"""Command-line tools for Checkout-Lens."""

from __future__ import annotations

import argparse
import asyncio
import json
import mimetypes
import sys
from pathlib import Path


def _read_image(path: str):
    from app.services.ingestion import CapturedImage

    p = Path(path)
    mime_type = mimetypes.guess_type(p.name)[0] or "application/octet-stream"
    return CapturedImage(data=p.read_bytes(), mime_type=mime_type, filename=p.name)


async def cmd_upload_baseline(args):
    """Upload a reference photo to the configured asset store and print its name."""
    from app.services import ingestion
    from app.services.asset_store import get_asset_store
    from app.services.ingestion import UploadError

    image = _read_image(args.image)
    try:
        store = get_asset_store()
        ref = await ingestion.upload(image, store)
    except (RuntimeError, UploadError) as e:
        print(f"Upload failed: {e}")
        sys.exit(1)

    print(ref.name)
    if args.room:
        print(f"Add to config.yaml under baselines.<property>.{args.room}: {ref.name}")


async def cmd_capture(args):
    """Capture one photo from a camera behind the orientation gate."""
    from app.config import get_settings
    from app.services.capture_gate import CaptureError, CaptureGate, OpenCVCamera, PitchWindow

    cfg = get_settings().capture
    source = int(args.source) if args.source.isdigit() else args.source
    try:
        gate = CaptureGate(
            OpenCVCamera(source),
            window=PitchWindow.from_config(cfg),
            jpeg_quality=cfg.jpeg_quality,
        )
        await gate.start()
        if args.pitch is not None:
            gate.update_pitch(args.pitch)
        if args.manual:
            gate.enable_manually()
        try:
            image = await gate.capture()
        finally:
            gate.stop()
    except CaptureError as e:
        print(f"Capture failed: {e}")
        sys.exit(1)

    Path(args.out).write_bytes(image.data)
    print(f"Saved {len(image.data) // 1024}KB to {args.out}")


async def cmd_inspect(args):
    """Upload four checkout photos to a running server and print the report."""
    import httpx

    from app.schemas import ROOM_SLOTS

    paths = {room: getattr(args, room.key) for room in ROOM_SLOTS}

    async with httpx.AsyncClient(base_url=args.server, timeout=args.timeout) as client:

        async def _upload(room, path):
            image = _read_image(path)
            r = await client.post("/upload", files={"image": (image.filename, image.data, image.mime_type)})
            if r.status_code != 200:
                print(f"  {room.value}: upload failed ({r.status_code}) {r.json().get('detail', '')}")
                return room, None
            name = r.json()["fileName"]
            print(f"  {room.value}: {name}")
            return room, name

        print("Uploading photos...")
        uploaded = dict(await asyncio.gather(*(_upload(room, path) for room, path in paths.items())))
        if not all(uploaded.values()):
            print("Not every room uploaded; aborting.")
            sys.exit(1)

        print("Analyzing...")
        body = {f"{room.key}Filename": name for room, name in uploaded.items()}
        body["propertyId"] = args.property
        r = await client.post("/compare", json=body)
        if r.status_code != 200:
            print(f"Comparison failed ({r.status_code}): {r.text}")
            sys.exit(1)

    report = r.json()
    if args.json:
        print(json.dumps(report, indent=2))
        return

    summary = report["summary"]
    print(f"\n{summary['overallStatus'].upper()}  ({summary['totalIssuesFound']} issues)")
    print(summary["summary"])
    for item in summary["itemsToCheck"]:
        print(f"  - [{item['room']}] {item['item']}")


def main():
    parser = argparse.ArgumentParser(description="Checkout-Lens CLI")
    subparsers = parser.add_subparsers(dest="command")

    # upload-baseline
    ub = subparsers.add_parser("upload-baseline", help="Upload a baseline reference photo")
    ub.add_argument("image", help="Path to a .jpg or .png photo")
    ub.add_argument("--room", default="", help="Room key (kitchen, bathroom, livingRoom, bedroom)")

    # capture
    cp = subparsers.add_parser("capture", help="Capture a photo from a camera")
    cp.add_argument("--source", default="0", help="Camera index or stream URL")
    cp.add_argument("--out", default="capture.jpg", help="Output file")
    cp.add_argument("--pitch", type=float, default=None, help="Current device pitch in degrees")
    cp.add_argument("--manual", action="store_true", help="Capture without a pitch reading")

    # inspect
    ins = subparsers.add_parser("inspect", help="Run a checkout inspection against a running server")
    ins.add_argument("--server", default="http://localhost:8000")
    ins.add_argument("--property", default="default", help="Property id with configured baselines")
    ins.add_argument("--timeout", type=float, default=180.0)
    ins.add_argument("--json", action="store_true", help="Print the raw report")
    ins.add_argument("--kitchen", required=True)
    ins.add_argument("--bathroom", required=True)
    ins.add_argument("--living-room", dest="livingRoom", required=True)
    ins.add_argument("--bedroom", required=True)

    args = parser.parse_args()
    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.command == "upload-baseline":
        asyncio.run(cmd_upload_baseline(args))
    elif args.command == "capture":
        asyncio.run(cmd_capture(args))
    elif args.command == "inspect":
        asyncio.run(cmd_inspect(args))


if __name__ == "__main__":
    main()
