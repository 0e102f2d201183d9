"""
Input validation for run submissions.

Only presence is checked here. Type coercion (integer parse, date parse,
radio membership) is checked afterwards by check_input_types.
"""

from apprunner.core.exceptions import ValidationError
from apprunner.models.contracts.inputs import Input, RunInputValue


def validate_inputs(inputs: list[Input], submitted: list[RunInputValue]) -> None:
    """
    Check submitted values against an app's declared inputs.

    Raises:
        ValidationError: If a required input without a default is missing
            (every missing title is listed in declaration order), or if a
            submitted title is not declared by the app.
    """
    submitted_titles = {value.title for value in submitted}

    missing = [
        item.title
        for item in inputs
        if item.required and not item.has_default and item.title not in submitted_titles
    ]
    if missing:
        raise ValidationError(f"Missing required inputs: {', '.join(missing)}")

    declared_titles = {item.title for item in inputs}
    unknown: list[str] = []
    for value in submitted:
        if value.title not in declared_titles and value.title not in unknown:
            unknown.append(value.title)
    if unknown:
        raise ValidationError(f"Invalid inputs not defined in app: {', '.join(unknown)}")
