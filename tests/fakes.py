# tests/fakes.py

from tasklane.identity import VerifiedIdentity


class FakeTokenVerifier:
    """Maps known bearer tokens to identities; anything else is rejected."""

    def __init__(self, tokens=None):
        self.tokens = dict(tokens or {})
        self.calls = []

    def verify(self, token):
        self.calls.append(token)
        return self.tokens.get(token)


class FakeTaskGenerator:
    def __init__(self, tasks=None, model="fake-model"):
        self.tasks = ["Read the docs", "Build a toy project"] if tasks is None else tasks
        self.model = model
        self.calls = []

    def generate(self, topic, count=None):
        self.calls.append((topic, count))
        return self.tasks, self.model


ALICE = VerifiedIdentity(subject_id="alice-uid", email="alice@example.com")
BOB = VerifiedIdentity(subject_id="bob-uid", email="bob@example.com")


def auth(token="alice-token"):
    return {"Authorization": f"Bearer {token}"}
