"""
Test doubles and quiz builders shared across test modules.
"""
from datetime import datetime, timedelta

import redis


class FakeClock:
    """Controllable naive-UTC clock"""

    def __init__(self, start=None):
        self.now = start or datetime(2024, 3, 1, 9, 0, 0)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class FakeRedis:
    """Records list pushes; optionally fails after `fail_after` pushes"""

    def __init__(self, fail_after=None):
        self.lists = {}
        self.fail_after = fail_after

    def rpush(self, key, value):
        pushed = sum(len(v) for v in self.lists.values())
        if self.fail_after is not None and pushed >= self.fail_after:
            raise redis.ConnectionError("connection refused")
        self.lists.setdefault(key, []).append(value)
        return len(self.lists[key])


def mc_question(question_id, correct=0, subject_area=None, weight=1.0):
    return {
        "question_id": question_id,
        "type": "multiple_choice",
        "question": f"Question {question_id}?",
        "options": ["A", "B", "C", "D"],
        "correct_answer": correct,
        "subject_area": subject_area,
        "weight": weight,
        "explanation": f"Option {correct} is correct.",
    }
