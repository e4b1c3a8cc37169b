# hazardscan/services/response_validator.py
import json

from pydantic import ValidationError

from hazardscan.core.exceptions import InvalidModelOutput
from hazardscan.schemas.analysis import AnalysisResult


def parse_analysis(raw_text: str) -> AnalysisResult:
    """
    Parse and validate the model's raw answer.

    Anything that is not a JSON object matching AnalysisResult raises
    InvalidModelOutput; no partial result is ever returned.
    """
    try:
        payload = json.loads(raw_text)
    except (TypeError, ValueError) as e:
        raise InvalidModelOutput(
            f"Model output is not valid JSON: {e}",
            {"details": [{"msg": str(e), "type": "json_invalid"}]},
        )

    if not isinstance(payload, dict):
        raise InvalidModelOutput(
            "Model output is not a JSON object",
            {"details": [{"msg": f"expected object, got {type(payload).__name__}", "type": "object_type"}]},
        )

    try:
        return AnalysisResult.model_validate(payload)
    except ValidationError as e:
        issues = e.errors(include_url=False, include_input=False, include_context=False)
        raise InvalidModelOutput(
            f"Model output failed schema validation ({e.error_count()} issues)",
            {"details": [
                {"loc": ".".join(str(p) for p in issue["loc"]), "msg": issue["msg"], "type": issue["type"]}
                for issue in issues
            ]},
        )
