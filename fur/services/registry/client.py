"""包仓库 HTTP 客户端

接口 (JSON):
    GET  /api/v1/packages/<name>[/<version>]   包元信息
    GET  /api/v1/packages?search=<query>        搜索
    GET  /api/v1/packages[?sort=<method>]       列表
    POST /api/v1/packages/<name>/download       下载上报
"""

from __future__ import annotations

import http.client
import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from typing import Any

from fur.core.exceptions import RegistryError, ValidationError
from fur.core.models import PackageListing, PackageMetadata

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1/packages"
_ALLOWED_SCHEMES = frozenset(("http", "https"))


class RegistryClient:
    """包仓库客户端，所有请求带固定超时"""

    def __init__(self, base_url: str, timeout: int = 30) -> None:
        scheme = urllib.parse.urlparse(base_url).scheme
        if scheme not in _ALLOWED_SCHEMES:
            raise ValidationError(
                f"不允许的仓库 URL 协议 '{scheme}'，仅支持 http/https: {base_url}"
            )
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _url(self, *segments: str, **query: str) -> str:
        path = "/".join(urllib.parse.quote(s, safe="") for s in segments)
        url = f"{self.base_url}{API_PREFIX}"
        if path:
            url += f"/{path}"
        params = {k: v for k, v in query.items() if v}
        if params:
            url += f"?{urllib.parse.urlencode(params)}"
        return url

    def _request(self, url: str, method: str = "GET") -> Any:
        logger.info("请求: %s %s", method, url)
        req = urllib.request.Request(
            url, method=method, headers={"Accept": "application/json"},
            data=b"" if method == "POST" else None,
        )
        with urllib.request.urlopen(req, timeout=self.timeout) as resp:  # nosec B310
            body = resp.read().decode("utf-8")
        return json.loads(body) if body.strip() else None

    def _get_json(self, url: str) -> Any:
        try:
            return self._request(url)
        except urllib.error.HTTPError as e:
            raise RegistryError(f"仓库返回 {e.code} {e.reason}: {url}") from e
        except (urllib.error.URLError, http.client.HTTPException, OSError) as e:
            raise RegistryError(f"网络错误: {url} - {e}") from e
        except json.JSONDecodeError as e:
            raise RegistryError(f"仓库响应不是合法 JSON: {url}") from e

    # ------------------------------------------------------------------
    # 查询
    # ------------------------------------------------------------------

    def fetch_package_metadata(
        self, name: str, version: str | None = None,
    ) -> PackageMetadata | None:
        """查询包元信息，404 返回 None"""
        url = self._url(name, version) if version else self._url(name)
        try:
            data = self._request(url)
        except urllib.error.HTTPError as e:
            if e.code == 404:
                logger.info("包不存在: %s", url)
                return None
            raise RegistryError(f"仓库返回 {e.code} {e.reason}: {url}") from e
        except (urllib.error.URLError, http.client.HTTPException, OSError) as e:
            raise RegistryError(f"网络错误: {url} - {e}") from e
        except json.JSONDecodeError as e:
            raise RegistryError(f"仓库响应不是合法 JSON: {url}") from e

        if not isinstance(data, dict):
            raise RegistryError(f"包元信息格式错误: {url}")
        try:
            return PackageMetadata.from_dict(data)
        except ValidationError as e:
            raise RegistryError(str(e)) from e

    def search_packages(self, query: str) -> list[PackageMetadata]:
        """搜索包，优先使用带详情的 detailedPackages"""
        data = self._get_json(self._url(search=query)) or {}
        detailed = data.get("detailedPackages") or []
        if detailed:
            return [PackageMetadata.from_dict(d) for d in detailed if d.get("name")]
        return [PackageMetadata(name=n) for n in data.get("packages") or []]

    def list_packages(self, sort: str | None = None) -> PackageListing:
        data = self._get_json(self._url(sort=sort or "")) or {}
        packages = [str(p) for p in data.get("packages") or []]
        return PackageListing(
            packages=packages,
            package_count=int(data.get("packageCount", len(packages))),
        )

    # ------------------------------------------------------------------
    # 下载上报
    # ------------------------------------------------------------------

    def report_download(self, name: str) -> bool:
        """上报一次下载；统计失败不影响安装，因此只返回 False"""
        url = self._url(name, "download")
        try:
            self._request(url, method="POST")
        except (urllib.error.URLError, http.client.HTTPException, OSError, ValueError) as e:
            logger.debug("下载上报失败 %s: %s", name, e)
            return False
        return True
