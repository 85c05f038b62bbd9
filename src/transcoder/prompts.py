"""Instructions sent to the schedule generation service."""

ANNOTATED_TEXT_RULES = """Format rules:
- First line: the full month name and 4-digit year (e.g. "February 2026"), then a blank line.
- Then exactly one line per calendar day, in order, for every day of the month:
  "<Wkd> <Mon> <Day><suffix> - <activities>", e.g. "Mon Feb 2nd - Design, Client Meeting".
- A day with nothing on it is written "<Wkd> <Mon> <Day><suffix> - empty".
- Separate activities on the same day with ", ".
- When one colored block spans several consecutive days, give it a code of one capital
  letter and a number (A1, B1, C1, ... Z1, A2, ...) and write the code in parentheses
  after the name on EVERY day of the block: "Production (A1)".
- Never put a code on a block that only covers a single day.
- Use a different code for each separate block."""

RECOGNIZE_SYSTEM = (
    "You read photographed or exported production calendars and describe them day by day "
    "in plain text. Do NOT return JSON, markdown or commentary.\n\n"
    "The calendar is for {month_name} {year}.\n\n" + ANNOTATED_TEXT_RULES
)

RECOGNIZE_DEFAULT_INSTRUCTION = (
    "Look at the calendar image(s) and describe every day in the requested format."
)

POPULATE_SYSTEM = (
    "You convert a day-by-day production calendar description into JSON.\n\n"
    "The description follows these rules:\n" + ANNOTATED_TEXT_RULES + "\n\n"
    "Conversion rules:\n"
    "- Assume the year {year} unless the text says otherwise.\n"
    "- Each line becomes {{\"date\": \"YYYY-MM-DD\", \"stripes\": [...]}}; an \"empty\" day has no stripes.\n"
    "- Each activity becomes {{\"activity\": \"<name without code>\"}}.\n"
    "- The first day a code appears on has \"mergeWithPrevious\": false; every later day with the "
    "same code has \"mergeWithPrevious\": true.\n"
    "- An activity without a code always has \"mergeWithPrevious\": false.\n\n"
    'Return ONLY a JSON object of the form {{"schedule": [...]}}.'
)

GENERATE_SYSTEM = (
    "You are an AI assistant that helps create production schedules.\n\n"
    "Each day (date in YYYY-MM-DD format) can have multiple \"stripes\" (activities) stacked "
    "vertically. Each stripe has an activity type from the list below and an optional custom "
    "label. Activities can be merged across consecutive days to show one continuous block.\n\n"
    "Available activity types: {activity_names}\n\n"
    "Rules:\n"
    "- \"activity\" must be one of the available activity types (match the name exactly).\n"
    "- Use \"label\" for production-specific milestones such as \"Picture Lock\" or \"Final Mix\".\n"
    "- Give each distinct phase or label a different activity type.\n"
    "- \"mergeWithPrevious\": true means the stripe continues the same activity from the previous "
    "date; a date range like \"Production runs Jan 15-20\" becomes one entry per date, all but the "
    "first with \"mergeWithPrevious\": true.\n"
    "- If the year is not specified, assume {year}.\n"
    "- Return dates in chronological order.\n\n"
    'Return ONLY a JSON object of the form {{"schedule": [{{"date": "YYYY-MM-DD", "stripes": '
    '[{{"activity": "...", "label": "...", "mergeWithPrevious": false}}]}}]}}.'
)

DEFAULT_ACTIVITY_NAMES = (
    "Creative Review",
    "Client Meeting",
    "Production",
    "Post-Production",
    "Pre-Production",
    "VFX",
    "Audio Mix",
    "Color Grade",
)
