"""Preset extraction schemas and field type catalogue offered to the schema builder."""

from models import FieldTypeInfo, SchemaField, SchemaTemplate, normalize_field_name

FIELD_TYPES: list[FieldTypeInfo] = [
    FieldTypeInfo(value="text", label="Text", description="General text content"),
    FieldTypeInfo(value="number", label="Number", description="Numeric values"),
    FieldTypeInfo(value="date", label="Date", description="Date values (YYYY-MM-DD)"),
    FieldTypeInfo(value="boolean", label="Boolean", description="True/False values"),
    FieldTypeInfo(value="email", label="Email", description="Email addresses"),
    FieldTypeInfo(value="phone", label="Phone", description="Phone numbers"),
    FieldTypeInfo(value="url", label="URL", description="Web addresses"),
]

# (name, description, type, required)
_PRESETS: dict[str, list[tuple[str, str, str, bool]]] = {
    "Fencing Services Pricing": [
        ("service_name", "Name of the fencing service (e.g., Site Visit, Material Cost - Wood, Labor Installation)", "text", True),
        ("description", "Description of what the service includes", "text", True),
        ("cost_min", "Minimum estimated cost (number only, e.g., 50 from '$50-$100')", "number", True),
        ("cost_max", "Maximum estimated cost (number only, e.g., 100 from '$50-$100')", "number", False),
        ("unit", "Pricing unit (e.g., 'per linear ft', 'each', 'flat rate')", "text", False),
    ],
    "Fencing Workflow Steps": [
        ("step_number", "The step number in the workflow sequence (1, 2, 3, etc.)", "number", True),
        ("step_name", "Name of the workflow step (e.g., 'Inquiry & Consultation', 'On-Site Measurement')", "text", True),
        ("step_description", "Detailed description of what happens in this step", "text", True),
    ],
    "Contact List": [
        ("name", "Person's full name", "text", True),
        ("email", "Email address", "email", True),
        ("phone", "Phone number", "phone", False),
        ("company", "Company or organization", "text", False),
    ],
    "Invoice Items": [
        ("item", "Item or product name", "text", True),
        ("quantity", "Number of items", "number", True),
        ("price", "Unit price", "number", True),
        ("total", "Total amount", "number", False),
    ],
    "Event Details": [
        ("event_name", "Name of the event", "text", True),
        ("date", "Event date", "date", True),
        ("location", "Event location", "text", False),
        ("attendees", "Number of attendees", "number", False),
    ],
}


def list_templates() -> list[SchemaTemplate]:
    """Build fresh template instances; each call gets new field ids."""
    return [
        SchemaTemplate(
            name=name,
            fields=[
                SchemaField(name=normalize_field_name(n), description=d, type=t, required=r)
                for n, d, t, r in specs
            ],
        )
        for name, specs in _PRESETS.items()
    ]


def get_template(name: str) -> SchemaTemplate | None:
    for template in list_templates():
        if template.name == name:
            return template
    return None
