"""Serialize tool results to the JSON text returned to the client."""

import json
from typing import Any

from pydantic_core import to_jsonable_python


def format_result(result: Any) -> str:  # noqa: ANN401
    """Pretty-printed JSON; pydantic models and their extra fields included"""
    return json.dumps(to_jsonable_python(result), indent=2, ensure_ascii=False)
