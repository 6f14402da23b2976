"""CSV parsing for bulk plan import."""

import io
from typing import List, Tuple

import pandas as pd
from pydantic import ValidationError as PydanticValidationError

from components.core.validation import violations_from_errors
from components.plan.schemas import BulkPlanItem, PlanImportError

REQUIRED_COLUMNS = ["planName", "totalAmount", "monthlyPayment"]
OPTIONAL_COLUMNS = ["id", "numberOfMonths", "debtOwner", "isActive"]


def parse_plans_csv(content: bytes) -> Tuple[List[BulkPlanItem], List[PlanImportError]]:
    """
    Parse a comma separated plans file.

    The header must name at least planName, totalAmount and monthlyPayment.
    Empty cells are treated as absent, so an empty numberOfMonths means the
    schedule is undecided and an empty id inserts a new plan.

    Returns:
        Tuple containing:
        - Parsed entries in file order (empty when any row is invalid)
        - Row level errors; row numbers count the header as row 1
    """
    try:
        frame = pd.read_csv(io.BytesIO(content), dtype=str, keep_default_na=False)
    except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as exc:
        return [], [PlanImportError(row=1, message=f"Unreadable CSV file: {exc}")]

    frame.columns = [str(column).strip() for column in frame.columns]
    missing = [column for column in REQUIRED_COLUMNS if column not in frame.columns]
    if missing:
        return [], [PlanImportError(row=1, message=f"Missing columns: {', '.join(missing)}")]

    known = [column for column in REQUIRED_COLUMNS + OPTIONAL_COLUMNS if column in frame.columns]
    items: List[BulkPlanItem] = []
    errors: List[PlanImportError] = []
    for row_num, record in enumerate(frame[known].to_dict(orient="records"), start=2):
        data = {key: value.strip() for key, value in record.items() if value.strip() != ""}
        try:
            items.append(BulkPlanItem.model_validate(data))
        except PydanticValidationError as exc:
            for violation in violations_from_errors(exc.errors()):
                errors.append(PlanImportError(row=row_num, message=f"{violation['field']}: {violation['message']}"))

    if errors:
        return [], errors
    return items, []
