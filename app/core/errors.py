from typing import Any, Iterable, Mapping


def format_validation_errors(errors: Iterable[Mapping[str, Any]]) -> str:
    """
    Gộp lỗi validate của pydantic thành một message cho client, ví dụ
    ``"env_vars: env_vars must be an object"``.

    Với lỗi từ validator tự viết (type ``value_error``) dùng nguyên text của
    ValueError, bỏ tiền tố "Value error, " mà pydantic thêm vào ``msg``.
    """
    messages = []
    for error in errors:
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        ctx_error = (error.get("ctx") or {}).get("error")
        if error.get("type") == "value_error" and ctx_error is not None:
            message = str(ctx_error)
        else:
            message = error.get("msg", "Invalid value")
        messages.append(f"{location}: {message}" if location else message)
    return "; ".join(messages) or "Invalid request"
