MESSAGE_FIELDS = {"id", "chatId", "content", "isUserMessage", "createdAt"}


def assert_camel_case_message(message):
    """Assert that a serialized message uses the camelCase wire field names."""
    assert set(message) == MESSAGE_FIELDS, f"Unexpected message fields: {sorted(message)}"


def assert_recommendations(payload, *expected):
    """Assert that a health payload carries exactly the expected recommendations."""
    assert payload["recommendations"] == list(expected), (
        f"Expected recommendations {list(expected)}, got {payload['recommendations']}"
    )
