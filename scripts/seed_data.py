#!/usr/bin/env python3
"""
Seed script — creates a small community through the public API.

Creates:
  • 6 users (registered through POST /api/users)
  • A profile for each user
  • 3 posts per user (18 total)
  • Likes and comments spread across the posts

Run against a running API:
  python scripts/seed_data.py --api-url http://localhost:8000

Tokens and IDs are printed so you can use them in curl commands.
"""
import argparse
import json
import random
import time
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Optional

PASSWORD = "devconnector"

BASE_USERS = [
    ("Alice Chen", "alice@example.com", "Senior Developer", "python, fastapi, sqlalchemy"),
    ("Bob Martinez", "bob@example.com", "Junior Developer", "javascript, react, node"),
    ("Carol Singh", "carol@example.com", "Data Engineer", "python, spark, airflow"),
    ("Dave Kim", "dave@example.com", "Designer", "figma, css, accessibility"),
    ("Eve Johnson", "eve@example.com", "SRE", "kubernetes, terraform, go"),
    ("Frank Williams", "frank@example.com", "Student", "c, rust, algorithms"),
]

SAMPLE_POSTS = [
    "Just shipped my first FastAPI service. Dependency injection is lovely.",
    "Anyone else still surprised by how much a unique index can simplify code?",
    "Pair programming session today fixed a bug we chased for a week.",
    "Writing tests first made this refactor painless.",
    "Reading the SQLAlchemy 2.0 docs again. The async story is solid now.",
    "Hot take: code review is the best way to onboard new teammates.",
    "Finally set up tracing for our API. The waterfall view tells you everything.",
    "Looking for a mentor in distributed systems — DMs open.",
    "Spent the afternoon deleting dead code. Best kind of commit.",
]

SAMPLE_COMMENTS = [
    "Great point!",
    "Totally agree with this.",
    "Could you share more details?",
    "Thanks for sharing.",
    "This is exactly what I needed today.",
]


@dataclass
class ApiClient:
    base_url: str

    def request(
        self, method: str, path: str, data: Optional[dict] = None, token: Optional[str] = None
    ) -> dict | list:
        url = f"{self.base_url}{path}"
        body = json.dumps(data).encode() if data is not None else None
        headers = {"Content-Type": "application/json"}
        if token:
            headers["x-auth-token"] = token
        req = urllib.request.Request(url, data=body, headers=headers, method=method)
        try:
            with urllib.request.urlopen(req, timeout=10) as resp:
                return json.loads(resp.read())
        except urllib.error.HTTPError as e:
            body = e.read().decode()
            print(f"  HTTP {e.code} on {method} {path}: {body}")
            return {}

    def get(self, path: str, token: Optional[str] = None) -> dict | list:
        return self.request("GET", path, token=token)

    def post(self, path: str, data: dict, token: Optional[str] = None) -> dict | list:
        return self.request("POST", path, data, token)

    def put(self, path: str, token: Optional[str] = None) -> dict | list:
        return self.request("PUT", path, token=token)


def wait_for_api(client: ApiClient, retries: int = 15) -> None:
    print(f"Waiting for API at {client.base_url} ...")
    for i in range(retries):
        try:
            result = client.get("/health")
            if result.get("status") == "ok":
                print("  API is ready!\n")
                return
        except urllib.error.URLError:
            pass
        time.sleep(3)
    raise RuntimeError(f"API not reachable at {client.base_url} after {retries} retries")


def get_token(client: ApiClient, name: str, email: str) -> str:
    """Register the user, or log in if the email is already taken."""
    result = client.post("/api/users", {"name": name, "email": email, "password": PASSWORD})
    if not result:
        result = client.post("/api/auth", {"email": email, "password": PASSWORD})
    return result.get("token", "")


def main(api_url: str) -> None:
    client = ApiClient(api_url)
    wait_for_api(client)

    # ── Create users + profiles ──────────────────────────────────────────
    print("Creating users and profiles...")
    tokens: dict[str, str] = {}
    for name, email, status, skills in BASE_USERS:
        token = get_token(client, name, email)
        if not token:
            print(f"  ✗ Failed to create {email}")
            continue
        tokens[email] = token
        client.post("/api/profile", {"status": status, "skills": skills}, token)
        print(f"  ✓ {name} <{email}>")

    if not tokens:
        print("No users created — aborting")
        return

    # ── Create posts ──────────────────────────────────────────────────────
    print("\nCreating posts...")
    post_ids: list[str] = []
    for token in tokens.values():
        for text in random.sample(SAMPLE_POSTS, k=3):
            result = client.post("/api/posts", {"text": text}, token)
            pid = result.get("post_id", "")
            if pid:
                post_ids.append(pid)
    print(f"  ✓ {len(post_ids)} posts created")

    # ── Likes and comments ────────────────────────────────────────────────
    print("\nAdding likes and comments...")
    likes = comments = 0
    all_tokens = list(tokens.values())
    for post_id in post_ids:
        for token in random.sample(all_tokens, k=random.randint(0, len(all_tokens))):
            if client.put(f"/api/posts/like/{post_id}", token):
                likes += 1
        for token in random.sample(all_tokens, k=random.randint(0, 2)):
            text = random.choice(SAMPLE_COMMENTS)
            if client.post(f"/api/posts/comment/{post_id}", {"text": text}, token):
                comments += 1
    print(f"  ✓ {likes} likes and {comments} comments added")

    # ── Print summary ─────────────────────────────────────────────────────
    print("\n" + "=" * 60)
    print("Seed complete! Here are some commands to try:\n")
    email, token = next(iter(tokens.items()))
    print(f"# Token for {email}:")
    print(f"  export TOKEN={token}\n")
    print("# List posts:")
    print(f"  curl -s '{api_url}/api/posts' -H \"x-auth-token: $TOKEN\" | python3 -m json.tool\n")
    if post_ids:
        print("# Like a post:")
        print(f"  curl -s -X PUT '{api_url}/api/posts/like/{post_ids[0]}' -H \"x-auth-token: $TOKEN\"\n")
    print("# Browse profiles (public):")
    print(f"  curl -s '{api_url}/api/profile' | python3 -m json.tool\n")
    print(f"# Metrics: {api_url}/metrics")
    print("=" * 60)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the DevConnector API")
    parser.add_argument("--api-url", default="http://localhost:8000", help="API base URL")
    args = parser.parse_args()
    main(args.api_url)
