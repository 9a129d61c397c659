import httpx
from unittest.mock import AsyncMock

from tests.fixtures.responses import completion_payload, wikipedia_search_payload


class LLMClientBuilder:
    """Factory for httpx client mocks that speak the chat-completions protocol."""

    def __init__(self):
        self.responses = {}
        self.default = "default response"
        self.requests = []

    def set_response(self, call_num, content=None, status_code=200, error=None):
        """
        Configure the outcome of a specific call number.

        content is returned as choices[0].message.content; error, when given,
        is raised instead of returning a response.
        """
        self.responses[call_num] = (content, status_code, error)
        return self

    def set_default(self, content):
        self.default = content
        return self

    @property
    def call_count(self):
        return len(self.requests)

    def build(self):
        """Build the AsyncMock."""

        async def _post(url, json=None, headers=None, **kwargs):
            self.requests.append({"url": url, "json": json, "headers": headers})
            content, status_code, error = self.responses.get(
                self.call_count,
                (self.default, 200, None)
            )

            if error is not None:
                raise error

            if status_code >= 400:
                return httpx.Response(status_code, text=content or "error")

            return httpx.Response(status_code, json=completion_payload(content))

        client = AsyncMock()
        client.post = AsyncMock(side_effect=_post)
        return client


class WikipediaClientBuilder:
    """Factory for Wikipedia REST search mocks keyed by query."""

    def __init__(self):
        self.pages = {}
        self.failing = set()
        self.raw_bodies = {}
        self.queries = []

    def set_pages(self, query, pages):
        self.pages[query] = pages
        return self

    def fail_for(self, query, status_code=503):
        self.failing.add((query, status_code))
        return self

    def set_raw_body(self, query, text):
        """Answer the query with 200 and a body that is not the search JSON."""
        self.raw_bodies[query] = text
        return self

    def build(self):
        async def _get(url, params=None, **kwargs):
            query = params["q"]
            limit = params["limit"]
            self.queries.append((query, limit))

            for failing_query, status_code in self.failing:
                if failing_query == query:
                    return httpx.Response(status_code, text="Service Unavailable")

            if query in self.raw_bodies:
                return httpx.Response(200, text=self.raw_bodies[query])

            return httpx.Response(200, json=wikipedia_search_payload(self.pages.get(query, [])[:limit]))

        client = AsyncMock()
        client.get = AsyncMock(side_effect=_get)
        client.builder = self
        return client
