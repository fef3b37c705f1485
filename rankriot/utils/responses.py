"""Response formatting utilities"""
from typing import Optional


def format_error_response(message: str, error_code: Optional[str] = None, **kwargs) -> dict:
    """
    Format a flat error response

    Example:
        return format_error_response("Webhook processing failed")
    """
    response = {"error": message}
    if error_code:
        response["error_code"] = error_code
    response.update(kwargs)
    return response


def format_success_response(message: str, data: Optional[dict] = None, **kwargs) -> dict:
    """
    Format a success response

    Example:
        return format_success_response("Project deleted", data={"id": str(project_id)})
    """
    response = {"message": message}
    if data:
        response["data"] = data
    response.update(kwargs)
    return response
