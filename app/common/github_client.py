# control-plane-api/app/common/github_client.py
import httpx
import logging
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)

GITHUB_API_BASE_URL = "https://api.github.com"
GITHUB_API_VERSION_HEADER = {"X-GitHub-Api-Version": "2022-11-28"}
DEFAULT_TIMEOUT_SECONDS = 15.0


def _error_details(response: httpx.Response) -> str:
    """Rút gọn body lỗi của GitHub: ưu tiên field `message` (+ `errors`) nếu là JSON."""
    details = response.text[:500]
    try:
        json_error = response.json()
    except ValueError: # Body không phải JSON
        return details
    if isinstance(json_error, dict):
        details = json_error.get("message", details)
        if "errors" in json_error:
            details += f" Details: {json_error['errors']}"
    return details


class GitHubAPIClient:
    """
    Client tối giản cho GitHub REST API, xác thực bằng token của platform
    (không phải token của user). Mỗi request mở một AsyncClient riêng.
    """

    def __init__(self, token: str, timeout: float = DEFAULT_TIMEOUT_SECONDS):
        if not token:
            raise ValueError("GitHub token is required for APIClient.")
        self.token = token
        self.timeout = timeout
        self.headers = {
            "Authorization": f"token {self.token}",
            "Accept": "application/vnd.github.v3+json",
            **GITHUB_API_VERSION_HEADER
        }

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        """
        Gửi request tới `GITHUB_API_BASE_URL + path`. kwargs được chuyển thẳng cho
        httpx.AsyncClient.request(). Lỗi HTTP (4xx/5xx) và lỗi mạng được log rồi raise lại.
        """
        url = f"{GITHUB_API_BASE_URL}{path}"
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            logger.debug(f"GitHub API Request: {method} {url}")
            try:
                response = await client.request(method, url, headers=self.headers, **kwargs)
                response.raise_for_status()
                return response
            except httpx.HTTPStatusError as e:
                logger.error(
                    f"GitHub API Error: {e.response.status_code} - {method} {url} - Response: {_error_details(e.response)}"
                )
                raise
            except httpx.RequestError as e: # Timeout, DNS, connection refused...
                logger.error(f"GitHub API Request Error: {method} {url} - {e}")
                raise

    async def create_workflow_dispatch(
        self,
        owner: str,
        repo: str,
        workflow_id: str,
        ref: str,
        inputs: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """
        Trigger một workflow_dispatch event. GitHub trả về 204 No Content khi thành công
        và không trả về run id, nên kết quả chỉ là True/False.
        """
        path = f"/repos/{owner}/{repo}/actions/workflows/{workflow_id}/dispatches"
        payload = {"ref": ref, "inputs": inputs or {}}
        logger.info(f"Dispatching workflow '{workflow_id}' on {owner}/{repo}@{ref}")
        try:
            await self._request("POST", path, json=payload)
            return True
        except Exception as e:
            logger.error(f"Failed to dispatch workflow '{workflow_id}' on {owner}/{repo}: {e}")
            return False
