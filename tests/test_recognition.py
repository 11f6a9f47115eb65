"""Tests for the simulated product recognizer."""

import asyncio

import pytest

from src.personalization.recognition import MockRecognizer


def scan_many(recognizer, n):
    async def run():
        return [await recognizer.recognize("image") for _ in range(n)]

    return asyncio.run(run())


def test_successful_scan_fields():
    recognizer = MockRecognizer(["1", "2", "3"], success_rate=1.0, seed=42, delay=(0.0, 0.0))

    for result in scan_many(recognizer, 20):
        assert result.product_id in {"1", "2", "3"}
        assert 0.85 <= result.confidence <= 1.0
        assert 50 <= result.bounding_box.x <= 150
        assert 50 <= result.bounding_box.y <= 150
        assert 200 <= result.bounding_box.width <= 300
        assert 200 <= result.bounding_box.height <= 300


def test_zero_success_rate_never_recognizes():
    recognizer = MockRecognizer(["1"], success_rate=0.0, seed=1, delay=(0.0, 0.0))

    assert scan_many(recognizer, 10) == [None] * 10


def test_empty_product_list_never_recognizes():
    recognizer = MockRecognizer([], success_rate=1.0, delay=(0.0, 0.0))

    assert scan_many(recognizer, 3) == [None] * 3


def test_seed_makes_scans_reproducible():
    first = scan_many(MockRecognizer(["1", "2"], seed=7, delay=(0.0, 0.0)), 15)
    second = scan_many(MockRecognizer(["1", "2"], seed=7, delay=(0.0, 0.0)), 15)

    assert first == second


def test_success_rate_is_roughly_respected():
    recognizer = MockRecognizer(["1"], success_rate=0.7, seed=0, delay=(0.0, 0.0))

    hits = sum(result is not None for result in scan_many(recognizer, 1000))

    assert 620 <= hits <= 780


def test_invalid_success_rate():
    with pytest.raises(ValueError):
        MockRecognizer(["1"], success_rate=1.5)
