"""Test doubles for external collaborators."""

from unittest.mock import MagicMock


class FakeLLMClient:
    """Stands in for TextGenerationClient; returns a canned reply or raises."""

    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    @property
    def available(self):
        return True

    def generate_json(self, system_prompt, prompt):
        self.calls.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply


def supabase_response(data):
    """Mimic the `.execute()` result of a Supabase query."""
    response = MagicMock()
    response.data = data
    return response
