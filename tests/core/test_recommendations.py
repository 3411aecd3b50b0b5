"""Tests for recommendation synthesis."""

from __future__ import annotations

import asyncio

import pytest

from siteaudit.core.recommendations import (
    FALLBACK_RECOMMENDATIONS,
    SYSTEM_PROMPT,
    build_prompt,
    parse_recommendations,
    synthesize_recommendations,
)
from siteaudit.schemas.audit import PerformanceReport, SearchResult


class TestParsing:
    def test_strips_ordinals_and_keeps_order(self):
        assert parse_recommendations("1. Do X\n2. Do Y\n3. Do Z") == ["Do X", "Do Y", "Do Z"]

    def test_caps_at_five(self):
        reply = "\n".join(f"{i}. Item {i}" for i in range(1, 9))
        assert parse_recommendations(reply) == [f"Item {i}" for i in range(1, 6)]

    def test_ignores_unnumbered_lines(self):
        reply = "Here are my suggestions:\n\n1. Compress images\n- not numbered\n  2.  Add alt text  \nThanks!"
        assert parse_recommendations(reply) == ["Compress images", "Add alt text"]

    def test_multi_digit_ordinals(self):
        assert parse_recommendations("10. Tenth") == ["Tenth"]

    def test_empty_reply(self):
        assert parse_recommendations("") == []


class TestPrompt:
    def test_prompt_embeds_metrics(
        self, sample_performance_report: PerformanceReport, sample_search_results: list[SearchResult]
    ):
        prompt = build_prompt("https://example.com", sample_performance_report, sample_search_results)

        assert "https://example.com" in prompt
        assert "PageSpeed Score: 85/100" in prompt
        assert "First Contentful Paint: 1.2s" in prompt
        assert "Largest Contentful Paint: 2.4s" in prompt
        assert "Cumulative Layout Shift: 0.05" in prompt
        assert "- Eliminate render-blocking resources: Resources are blocking the first paint." in prompt
        assert "3 pages indexed" in prompt

    def test_prompt_without_search_data(self, sample_performance_report: PerformanceReport):
        prompt = build_prompt("https://example.com", sample_performance_report, None)
        assert "0 pages indexed" in prompt


class TestSynthesis:
    @pytest.mark.asyncio
    async def test_returns_parsed_reply(self, sample_performance_report, text_generator):
        result = await synthesize_recommendations(
            "https://example.com", sample_performance_report, [], text_generator
        )

        assert result == ["Do X", "Do Y", "Do Z"]
        assert len(text_generator.calls) == 1
        system_prompt, _ = text_generator.calls[0]
        assert system_prompt == SYSTEM_PROMPT

    @pytest.mark.asyncio
    async def test_generator_error_falls_back(self, sample_performance_report, raising):
        result = await synthesize_recommendations(
            "https://example.com", sample_performance_report, None, raising("HTTP 429")
        )
        assert result == list(FALLBACK_RECOMMENDATIONS)
        assert len(result) == 5

    @pytest.mark.asyncio
    async def test_malformed_reply_falls_back(self, sample_performance_report, make_text_generator):
        generator = make_text_generator(reply="I cannot help with that.")
        result = await synthesize_recommendations(
            "https://example.com", sample_performance_report, None, generator
        )
        assert result == list(FALLBACK_RECOMMENDATIONS)

    @pytest.mark.asyncio
    async def test_slow_generator_falls_back(self, sample_performance_report):
        async def slow(system_prompt: str, user_prompt: str) -> str:
            await asyncio.sleep(10)
            return "1. Too late"

        result = await synthesize_recommendations(
            "https://example.com", sample_performance_report, None, slow, timeout=0.05
        )
        assert result == list(FALLBACK_RECOMMENDATIONS)
