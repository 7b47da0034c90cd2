"""Stub httpx clients shared by the test modules."""

import httpx


def token_response(access_token="tok-1", expires_in=3600):
    return httpx.Response(
        200, json={"token_type": "Bearer", "expires_in": expires_in, "access_token": access_token}
    )


class MockAsyncClient:
    """Replays queued responses for token POSTs and API GETs separately."""

    def __init__(self, *, posts=None, gets=None):
        self.posts = list(posts or [])
        self.gets = list(gets or [])
        self.post_calls = []
        self.get_calls = []

    async def post(self, path, data=None, headers=None):
        self.post_calls.append({"path": path, "data": data, "headers": headers})
        if not self.posts:
            raise RuntimeError("No mock token responses")
        return self.posts.pop(0)

    async def get(self, path, params=None, headers=None):
        self.get_calls.append({"path": path, "params": params, "headers": headers})
        if not self.gets:
            raise RuntimeError("No mock API responses")
        return self.gets.pop(0)

    async def aclose(self):
        return None


class FailingAsyncClient:
    def __init__(self, exc: Exception):
        self.exc = exc

    async def post(self, *_args, **_kwargs):
        raise self.exc

    async def get(self, *_args, **_kwargs):
        raise self.exc

    async def aclose(self):
        return None
