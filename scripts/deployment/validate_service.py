#!/usr/bin/env python3
"""
Validation script for the TinyLink service.
Exercises a live deployment: creation, inspection, redirects, claiming and deletion.
"""

import sys
import random
import string
import requests
from typing import Optional
from datetime import datetime


def _random_code(length: int = 8) -> str:
    return "".join(random.choices(string.ascii_letters + string.digits, k=length))


class ServiceValidator:
    """Validates TinyLink service functionality."""

    def __init__(self, base_url: str = "http://localhost:9200", identity_header: str = "X-User-Id"):
        self.base_url = base_url.rstrip("/")
        self.identity_header = identity_header
        self.owner_id = f"validator-{_random_code(6)}"
        self.session = requests.Session()
        self.test_results = []

    def print_header(self, text: str):
        print(f"\n{'='*60}")
        print(f"  {text}")
        print(f"{'='*60}\n")

    def print_test(self, name: str, passed: bool, details: str = ""):
        status = "✅ PASS" if passed else "❌ FAIL"
        self.test_results.append((name, passed))
        print(f"{status} - {name}")
        if details:
            print(f"       {details}")

    def _as_owner(self) -> dict:
        return {self.identity_header: self.owner_id}

    def test_health_check(self) -> bool:
        try:
            response = self.session.get(f"{self.base_url}/api/health", timeout=5)
            if response.status_code == 200:
                data = response.json()
                is_healthy = data.get("status") == "healthy" and data.get("store") == "healthy"
                details = f"Store: {data.get('store')}, Cache: {data.get('cache', 'N/A')}"
                self.print_test("Health Check", is_healthy, details)
                return is_healthy
            self.print_test("Health Check", False, f"Status: {response.status_code}")
            return False
        except requests.RequestException as e:
            self.print_test("Health Check", False, f"Error: {str(e)}")
            return False

    def test_create_anonymous_link(self) -> Optional[str]:
        try:
            response = self.session.post(
                f"{self.base_url}/api/links",
                json={"target_url": f"https://example.com/validate/{_random_code()}"},
                timeout=5,
            )
            if response.status_code == 201:
                data = response.json()
                code = data.get("code")
                anonymous = data.get("is_anonymous") and data.get("expires_at")
                self.print_test(
                    "Create Anonymous Link",
                    bool(code and anonymous),
                    f"Code: {code}, expires: {data.get('expires_at')}",
                )
                return code
            self.print_test("Create Anonymous Link", False, f"Status: {response.status_code}")
            return None
        except requests.RequestException as e:
            self.print_test("Create Anonymous Link", False, f"Error: {str(e)}")
            return None

    def test_inspect(self, code: str, expected_clicks: int) -> bool:
        try:
            response = self.session.get(f"{self.base_url}/api/links/{code}", timeout=5)
            if response.status_code == 200:
                clicks = response.json().get("total_clicks")
                passed = clicks == expected_clicks
                self.print_test("Inspect Link", passed, f"Clicks: {clicks} (expected {expected_clicks})")
                return passed
            self.print_test("Inspect Link", False, f"Status: {response.status_code}")
            return False
        except requests.RequestException as e:
            self.print_test("Inspect Link", False, f"Error: {str(e)}")
            return False

    def test_redirect(self, code: str) -> bool:
        try:
            response = self.session.get(f"{self.base_url}/{code}", allow_redirects=False, timeout=5)
            location = response.headers.get("Location", "")
            is_redirect = response.status_code == 302 and "link-not-found" not in location
            self.print_test(
                "Redirect",
                is_redirect,
                f"Redirects to: {location[:50]}..." if location else "No Location header",
            )
            return is_redirect
        except requests.RequestException as e:
            self.print_test("Redirect", False, f"Error: {str(e)}")
            return False

    def test_missing_code_redirect(self) -> bool:
        try:
            response = self.session.get(f"{self.base_url}/{_random_code()}", allow_redirects=False, timeout=5)
            location = response.headers.get("Location", "")
            passed = response.status_code == 302 and "reason=not_found" in location
            self.print_test("Missing Code Redirect", passed, f"Location: {location}")
            return passed
        except requests.RequestException as e:
            self.print_test("Missing Code Redirect", False, f"Error: {str(e)}")
            return False

    def test_duplicate_code(self) -> bool:
        code = _random_code()
        try:
            first = self.session.post(
                f"{self.base_url}/api/links",
                json={"target_url": "https://example.com/first", "code": code},
                timeout=5,
            )
            second = self.session.post(
                f"{self.base_url}/api/links",
                json={"target_url": "https://example.com/second", "code": code},
                timeout=5,
            )
            passed = first.status_code == 201 and second.status_code == 409
            self.print_test(
                "Duplicate Code Rejection",
                passed,
                f"Statuses: {first.status_code}, {second.status_code} (expected 201, 409)",
            )
            return passed
        except requests.RequestException as e:
            self.print_test("Duplicate Code Rejection", False, f"Error: {str(e)}")
            return False

    def test_invalid_target(self) -> bool:
        try:
            response = self.session.post(
                f"{self.base_url}/api/links",
                json={"target_url": "ftp://bad"},
                timeout=5,
            )
            passed = response.status_code == 400
            self.print_test("Invalid Target Rejection", passed, f"Status: {response.status_code} (expected 400)")
            return passed
        except requests.RequestException as e:
            self.print_test("Invalid Target Rejection", False, f"Error: {str(e)}")
            return False

    def test_claim(self, code: str) -> bool:
        try:
            first = self.session.post(
                f"{self.base_url}/api/links/claim",
                json={"codes": [code]},
                headers=self._as_owner(),
                timeout=5,
            )
            second = self.session.post(
                f"{self.base_url}/api/links/claim",
                json={"codes": [code]},
                headers=self._as_owner(),
                timeout=5,
            )
            counts = (first.json().get("transferred_count"), second.json().get("transferred_count"))
            passed = first.status_code == 200 and counts == (1, 0)
            self.print_test("Claim Link", passed, f"Transferred: {counts} (expected (1, 0))")
            return passed
        except (requests.RequestException, ValueError) as e:
            self.print_test("Claim Link", False, f"Error: {str(e)}")
            return False

    def test_list_and_delete(self, code: str) -> bool:
        try:
            listing = self.session.get(f"{self.base_url}/api/links", headers=self._as_owner(), timeout=5)
            listed = any(item.get("code") == code for item in listing.json())
            deleted = self.session.delete(f"{self.base_url}/api/links/{code}", headers=self._as_owner(), timeout=5)
            gone = self.session.get(f"{self.base_url}/api/links/{code}", timeout=5)
            passed = listed and deleted.status_code == 200 and gone.status_code == 404
            self.print_test(
                "List And Delete",
                passed,
                f"Listed: {listed}, delete: {deleted.status_code}, after: {gone.status_code}",
            )
            return passed
        except (requests.RequestException, ValueError) as e:
            self.print_test("List And Delete", False, f"Error: {str(e)}")
            return False

    def run_all_tests(self) -> bool:
        """Run all validation tests."""
        self.print_header("TinyLink Service Validation")
        print(f"Testing service at: {self.base_url}")
        print(f"Timestamp: {datetime.now().isoformat()}\n")

        if not self.test_health_check():
            print("\n❌ Health check failed. Service may not be running.")
            print(f"   Make sure the service is accessible at {self.base_url}")
            return False

        print()

        code = self.test_create_anonymous_link()
        if code:
            self.test_inspect(code, expected_clicks=0)
            self.test_redirect(code)
            self.test_inspect(code, expected_clicks=1)
            self.test_claim(code)
            self.test_list_and_delete(code)

        print()

        self.test_duplicate_code()
        self.test_invalid_target()
        self.test_missing_code_redirect()

        self.print_summary()

        return all(passed for _, passed in self.test_results)

    def print_summary(self):
        total = len(self.test_results)
        passed = sum(1 for _, p in self.test_results if p)
        failed = total - passed

        self.print_header("Test Summary")
        print(f"Total Tests:  {total}")
        print(f"✅ Passed:     {passed}")
        print(f"❌ Failed:     {failed}")
        print(f"Success Rate: {(passed/total*100):.1f}%")

        if failed > 0:
            print("\n⚠️  Failed tests:")
            for name, passed in self.test_results:
                if not passed:
                    print(f"   - {name}")

        print()


def main():
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Validate TinyLink service functionality"
    )
    parser.add_argument(
        "--url",
        default="http://localhost:9200",
        help="Base URL of the service (default: http://localhost:9200)"
    )
    parser.add_argument(
        "--identity-header",
        default="X-User-Id",
        help="Header the service reads the authenticated user id from"
    )

    args = parser.parse_args()

    validator = ServiceValidator(args.url, identity_header=args.identity_header)

    try:
        success = validator.run_all_tests()
        sys.exit(0 if success else 1)
    except KeyboardInterrupt:
        print("\n\n⚠️  Validation interrupted by user")
        sys.exit(2)


if __name__ == "__main__":
    main()
