"""Inspection agent prompts, reference inventories and response schemas."""

from app.schemas.inspection import RoomSlot

ROOM_INVENTORIES: dict[RoomSlot, str] = {
    RoomSlot.KITCHEN: """Large Appliances & Furniture
* 1 Double-Door Commercial Refrigerator: Large black-frame unit with glass doors.
* 1 Standard Oven/Range: Integrated into the lower black cabinetry.
* Black Cabinetry System: Includes multiple large drawers with silver horizontal handles.
* White Countertops: L-shaped preparation surface.
Small Appliances (High Theft Risk)
* 1 Professional Espresso/Coffee Machine: Large black unit on the far left.
* 1 Mini Milk/Beverage Fridge: Small black countertop unit with a glass door.
* 1 Water Bar dispenser: Located to the right of the milk dispenser.
* 1 Microwave: Silver unit on the far right of the counter.
* 1 Electric Milk Frother: Small black unit next to the toaster.
* 1 Panini Press/Griddle: Small black appliance near the kettle.
Fixtures & Safety Equipment
* 1 Fire Extinguisher: Red canister on the floor between the cabinets and the refrigerator.
* 2 Floating Wooden Shelves: Mounted on the wall above the main counter.
* Track Lighting System: Black ceiling-mounted rail with three adjustable spotlights.
* 1 Built-in Sink: Stainless steel or white basin integrated into the left counter.
* Wall Fixtures: Electrical outlets and switches on the white tiled backsplash.
Decor & Non-Food Items
* Glass Containers/Jars: Several empty glass storage jars on the shelves and counter.
* Herringbone Wood Flooring: Light-colored patterned wooden floor.""",

    RoomSlot.BATHROOM: """Fixtures & Furniture
* 3 Sinks: Large, white rectangular vessel sinks wall-mounted in a row.
* 3 Faucets: Silver, wall-mounted industrial-style taps.
* 3 Mirrors: Round mirrors with thin gold/brass frames.
* 3 Wall Lights: Black gooseneck fixtures with large exposed round bulbs.
* 1 Paper Towel Dispenser: White plastic unit mounted on the far wall.
* 1 Wicker Basket: Bottom left foreground, sitting on a black counter.
* 3 Counter Sections: Black floating surfaces between the sinks holding decor and soap.
Decor & Amenities
* 2 Potted Plants: Small artificial greenery in black pots between the sinks.
* 3 Soap Bottles: Large amber bottles with pump dispensers.
* 1 Metal Canister: White/silver pressurized canister next to the first plant.""",

    RoomSlot.LIVING_ROOM: """Electronics & Technology (High Theft Risk)
* 1 Large Flat-Screen TV: Wall-mounted with visible cables.
* 1 Video Conferencing Bar/Camera: Black unit mounted directly above the TV.
* 1 Tablet: On a charging stand at the left of the wooden console, white cable attached.
* 1 Air Conditioning Unit: White wall-mounted unit at the top of the frame.
Furniture & Large Assets
* 1 Wooden Media Console: Mid-century style with two drawers and three open compartments.
* 2 Leather/Vinyl Armchairs: Brown bucket-style seats with thin black metal legs.
* 1 Large Potted Fiddle Leaf Fig: In the corner by the window, terracotta-style pot.
* 1 Area Rug: Dark, mottled grey and black low-pile carpet.
Decor & Small Items
* 1 Blue House-Shaped Sculpture: Large decorative "Home" logo on the console.
* 1 QR Code/Information Stand: Small wooden base with a printed card next to the tablet.
* 1 Wall Sconce/Light: Industrial black fixture with an exposed bulb above the window.
* 1 Window Blind/Shade: White horizontal slatted blind.
* Books/Media: Items stored in the open compartments of the console.
Structural Features
* 1 Large Window: City view, black frames.
* White Painted Walls: Large surface behind the TV and console.
* Power Outlets: Two white sockets between the console and the plant.""",

    RoomSlot.BEDROOM: """Furniture & Large Assets
* 1 Pink Loveseat/Sofa: Mid-century style with light wood legs.
* 2 Armchairs: One light grey (right) and one dark grey (left).
* 1 Wooden Coffee Table: Round, light-colored wood.
* 1 Side Table: Small round wooden table (left, holding a plant).
* 1 Large Geometric Bookshelf: White honeycomb/diamond shelving built into the wall.
* 1 Area Rug: Dark blue/grey textured rug under the seating area.
Decor & Small Items (High Theft/Damage Risk)
* 4 Throw Pillows: On the pink sofa; three branded, one with a green geometric pattern.
* 2 Accent Cushions: One teal (left chair), one light blue with yellow detail (right chair).
* 8+ Trophies/Awards: Glass and acrylic awards inside the geometric shelf units.
* 1 Large Glass Vase: On the coffee table, containing green foliage.
* 1 Glass Cup/Mug: On the coffee table.
* 4+ Small Vases/Bottles: Clear glass decorative bottles inside the shelf units.
Greenery & Structure
* 4 Potted Plants: large floor plant (left), plant on the side table, snake plant right of the sofa, small plant on top of the shelf.
* Structural Features: Concrete-finish pillar (left) and light wood laminate flooring.""",
}

DAMAGE_ASSESSMENT_PROMPT = """You are inspecting a {room} for property damage after guest checkout.

**REFERENCE INVENTORY:**
{inventory}

**YOUR TASK:**
Compare the PREVIOUS image (first, pre-check-in baseline) with the CURRENT image (second, post-checkout).

**ANALYSIS PROTOCOL:**

Step 1 - SYSTEMATIC SCAN:
- Divide the room mentally into a 3x3 grid
- Scan from left to right, top to bottom
- For each grid section, compare previous vs current images

Step 2 - INVENTORY VERIFICATION:
- Go through each item in the reference inventory above
- Check if the item is visible and intact in BOTH images
- Note if an item appears damaged or missing in the CURRENT image only

Step 3 - DAMAGE IDENTIFICATION:
Focus ONLY on physical damage or absence:
- Missing items that were present before
- Broken/cracked items (glass, mirrors, furniture)
- Stains or damage to surfaces (walls, floors, counters)
- Damaged fixtures (doors, handles, faucets)

IGNORE: Clutter, mess, displaced items, lighting differences, slight movements

Step 4 - SEVERITY ASSESSMENT:
- LOW: Minor scuffs, easily cleanable marks
- MEDIUM: Noticeable damage requiring repair/replacement
- HIGH: Significant structural damage or missing expensive items

**OUTPUT FORMAT:**
Respond with a JSON object following this exact schema:
{{
  "damageDetected": boolean,
  "items": [
    {{
      "itemName": "specific item name",
      "condition": "missing" | "damaged" | "broken",
      "description": "brief specific description of the issue",
      "severity": "low" | "medium" | "high"
    }}
  ],
  "notes": "any additional context (optional)"
}}

If no damage detected, return: {{"damageDetected": false, "items": [], "notes": "No damage or missing items detected"}}"""

SUMMARY_PROMPT = """Analyze these room damage assessments and create a concise summary:

{assessments}

Provide a JSON response with this schema:
{{
  "overallStatus": "all_clear" | "minor_issues" | "major_concerns",
  "summary": "A 1-2 line description of the overall property condition",
  "itemsToCheck": [
    {{
      "room": "Room Name",
      "item": "specific item description"
    }}
  ],
  "totalIssuesFound": number
}}

Rules:
- "all_clear": No damage in any room
- "minor_issues": Only low severity items
- "major_concerns": Any medium/high severity items
- "summary": Write 1-2 sentences describing the overall condition (e.g., "Property is in excellent condition with no damage detected" or "Minor issues found requiring attention before next guest")
- "itemsToCheck": List only actionable items with their room names that require attention or verification
- Rooms marked "degraded" could not be assessed automatically; list them for manual verification
- Include the room name for each item to make it clear where issues were found"""

DAMAGE_REPORT_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "damageDetected": {"type": "BOOLEAN"},
        "items": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "itemName": {"type": "STRING"},
                    "condition": {"type": "STRING", "enum": ["missing", "damaged", "broken"]},
                    "description": {"type": "STRING"},
                    "severity": {"type": "STRING", "enum": ["low", "medium", "high"]},
                },
                "required": ["itemName", "condition", "description", "severity"],
            },
        },
        "notes": {"type": "STRING"},
    },
    "required": ["damageDetected", "items"],
}

SUMMARY_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "overallStatus": {"type": "STRING", "enum": ["all_clear", "minor_issues", "major_concerns"]},
        "summary": {"type": "STRING"},
        "itemsToCheck": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "room": {"type": "STRING"},
                    "item": {"type": "STRING"},
                },
                "required": ["room", "item"],
            },
        },
        "totalIssuesFound": {"type": "NUMBER"},
    },
    "required": ["overallStatus", "summary", "itemsToCheck", "totalIssuesFound"],
}
