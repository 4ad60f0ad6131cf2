#!/usr/bin/env python3
"""
Smoke test for a running short link deployment.

Exercises the public HTTP surface: health, shorten, permanent redirect,
distinct codes for repeated URLs, input rejection, unknown codes and the
index page. Exit status is 0 only when every check passes.
"""

import argparse
import sys
import time
from datetime import datetime
from typing import Callable, List, Optional, Tuple

import requests


CheckResult = Tuple[bool, str]


class ServiceValidator:
    """Runs checks against a live short link service."""

    def __init__(self, base_url: str = "http://localhost:8080", path_prefix: str = "/go", timeout: float = 5.0):
        self.base_url = base_url.rstrip("/")
        prefix = path_prefix.strip("/")
        self.path_prefix = f"/{prefix}" if prefix else ""
        self.timeout = timeout
        self.session = requests.Session()
        self.results: List[Tuple[str, bool]] = []

    def short_link(self, short_code: str) -> str:
        return f"{self.base_url}{self.path_prefix}/{short_code}"

    def check(self, name: str, func: Callable[[], CheckResult]) -> bool:
        """Run one check, recording and printing its outcome."""
        try:
            passed, details = func()
        except (requests.RequestException, ValueError) as e:
            passed, details = False, f"error: {e}"

        self.results.append((name, passed))
        print(f"{'PASS' if passed else 'FAIL'}  {name}")
        if details:
            print(f"      {details}")
        return passed

    def shorten(self, long_url: str) -> requests.Response:
        return self.session.post(
            f"{self.base_url}/api/shorten",
            json={"longUrl": long_url},
            timeout=self.timeout,
        )

    def health(self) -> CheckResult:
        response = self.session.get(f"{self.base_url}/api/health", timeout=self.timeout)
        if response.status_code != 200:
            return False, f"status {response.status_code}"
        data = response.json()
        return data.get("status") == "healthy", f"database={data.get('database')} cache={data.get('cache')}"

    def create(self, long_url: str) -> Tuple[CheckResult, Optional[str]]:
        response = self.shorten(long_url)
        if response.status_code != 201:
            return (False, f"status {response.status_code}"), None
        data = response.json()
        short_code = data.get("shortCode")
        passed = bool(short_code) and data.get("shortUrl", "").endswith(f"{self.path_prefix}/{short_code}")
        return (passed, data.get("shortUrl", "")), short_code

    def redirect(self, short_code: str, long_url: str) -> CheckResult:
        response = self.session.get(self.short_link(short_code), allow_redirects=False, timeout=self.timeout)
        location = response.headers.get("Location", "")
        return response.status_code == 308 and location == long_url, f"status {response.status_code} -> {location}"

    def distinct(self, long_url: str, first_code: str) -> CheckResult:
        response = self.shorten(long_url)
        second_code = response.json().get("shortCode") if response.status_code == 201 else None
        return second_code is not None and second_code != first_code, f"{first_code} then {second_code}"

    def rejects_invalid(self) -> CheckResult:
        response = self.shorten("http://example..com")
        error = response.json().get("error")
        return response.status_code == 400 and error == "invalid_input", f"status {response.status_code}, error={error}"

    def unknown_code(self) -> CheckResult:
        response = self.session.get(self.short_link("doesnotexist"), allow_redirects=False, timeout=self.timeout)
        return response.status_code == 404 and "Location" not in response.headers, f"status {response.status_code}"

    def index_page(self) -> CheckResult:
        response = self.session.get(f"{self.base_url}/", timeout=self.timeout)
        content_type = response.headers.get("content-type", "")
        return response.status_code == 200 and "text/html" in content_type, content_type

    def run(self) -> bool:
        print(f"Validating {self.base_url} at {datetime.now().isoformat()}\n")

        if not self.check("Health", self.health):
            print(f"\nService at {self.base_url} is not healthy; skipping remaining checks")
            return False

        long_url = f"https://example.com/validate/{int(time.time())}?check=1"
        created = {}

        def create_check() -> CheckResult:
            result, created["code"] = self.create(long_url)
            return result

        if self.check("Shorten", create_check) and created.get("code"):
            self.check("Permanent redirect", lambda: self.redirect(created["code"], long_url))
            self.check("Repeat shorten gets a new code", lambda: self.distinct(long_url, created["code"]))

        self.check("Invalid URL rejected", self.rejects_invalid)
        self.check("Unknown code is 404", self.unknown_code)
        self.check("Index page", self.index_page)

        failed = [name for name, passed in self.results if not passed]
        print(f"\n{len(self.results) - len(failed)}/{len(self.results)} checks passed")
        for name in failed:
            print(f"  failed: {name}")

        return not failed


def main():
    parser = argparse.ArgumentParser(description="Smoke test a running short link service")
    parser.add_argument("--url", default="http://localhost:8080", help="Service base URL")
    parser.add_argument("--path-prefix", default="/go", help="Short link path prefix")
    parser.add_argument("--timeout", type=float, default=5.0, help="Per-request timeout in seconds")
    args = parser.parse_args()

    validator = ServiceValidator(args.url, args.path_prefix, args.timeout)

    try:
        sys.exit(0 if validator.run() else 1)
    except KeyboardInterrupt:
        print("\nValidation interrupted")
        sys.exit(2)


if __name__ == "__main__":
    main()
