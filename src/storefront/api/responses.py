"""The response envelope shared by every endpoint."""


def envelope(data=None, message: str | None = None, success: bool = True, errors: list | None = None) -> dict:
    body = {"success": success}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    if errors:
        body["errors"] = errors
    return body
