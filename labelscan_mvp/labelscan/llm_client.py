import json
from typing import Any

import requests


class OpenAIAPIError(RuntimeError):
    def __init__(self, status_code: int, err_type: str, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.err_type = err_type
        self.message = message


class ChatResponseError(ValueError):
    pass


def _api_error(resp: requests.Response) -> OpenAIAPIError:
    # {"error": {"type", "message"}} or {"error": "..."}; otherwise the raw body
    try:
        body = resp.json()
    except ValueError:
        body = None
    err = body.get("error") if isinstance(body, dict) else None
    if isinstance(err, dict):
        return OpenAIAPIError(
            resp.status_code,
            str(err.get("type") or "api_error"),
            str(err.get("message") or resp.text),
        )
    if isinstance(err, str):
        return OpenAIAPIError(resp.status_code, "api_error", err)
    return OpenAIAPIError(resp.status_code, "api_error", resp.text)


def chat_content(data: Any) -> Any:
    """
    Return choices[0].message.content of a chat completion, JSON-decoded
    when it parses. Bodies without a "choices" key pass through unchanged.
    """
    if not isinstance(data, dict) or "choices" not in data:
        return data
    choices = data["choices"]
    first = choices[0] if isinstance(choices, list) and choices else None
    message = first.get("message") if isinstance(first, dict) else None
    content = message.get("content") if isinstance(message, dict) else None
    if not isinstance(content, str):
        raise ChatResponseError("chat completion has no message content")
    try:
        return json.loads(content)
    except ValueError:
        return content


class LLMClient:
    def __init__(self, api_key: str, base_url: str, model: str, timeout: float = 30):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout

    def json_call(self, system: str, user: str) -> Any:
        # single attempt; callers fall back instead of retrying
        r = requests.post(
            f"{self.base_url}/chat/completions",
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            json={
                "model": self.model,
                "messages": [
                    {"role": "system", "content": system},
                    {"role": "user", "content": user},
                ],
                "response_format": {"type": "json_object"},
                "temperature": 0.3,
            },
            timeout=self.timeout,
        )

        try:
            r.raise_for_status()
        except requests.HTTPError:
            raise _api_error(r)

        try:
            data = r.json()
        except ValueError:
            # not JSON at all; let the caller decide what to do with the text
            return r.text

        return chat_content(data)
