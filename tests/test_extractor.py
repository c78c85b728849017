"""
Tests for recommendation extraction and display cleanup.
"""

import pytest

from storefront.entities import DEFAULT_REASON, UNKNOWN_PRODUCT
from storefront.errors import MalformedPayload
from storefront.recommendations.extractor import (
    clean_message_for_display,
    decode_recommendation,
    extract_recommendation,
    find_balanced_object,
    locate_payload,
)


ROUND_TRIP_REPLY = (
    'Here you go:\n```json\n'
    '{"recommendedProducts":[{"productTitle":"Premium Car Wax","priority":1,"reason":"shine"}],'
    '"customerGoal":"shine"}\n```'
)


class TestExtractRecommendation:
    def test_tagged_fence_round_trip(self):
        recommendation = extract_recommendation(ROUND_TRIP_REPLY)

        assert recommendation is not None
        assert len(recommendation.recommended_products) == 1
        product = recommendation.recommended_products[0]
        assert product.product_title == "Premium Car Wax"
        assert product.priority == 1
        assert product.reason == "shine"
        assert recommendation.customer_goal == "shine"
        assert recommendation.reasoning is None

    def test_untagged_fence_with_marker(self):
        reply = 'Try these.\n```\n{"recommendedProducts": [{"title": "Tire Shine", "priority": 2}]}\n```'

        recommendation = extract_recommendation(reply)

        assert recommendation.recommended_products[0].product_title == "Tire Shine"
        assert recommendation.recommended_products[0].priority == 2

    def test_untagged_fence_without_marker_is_ignored(self):
        reply = 'Example:\n```\n{"steps": 3}\n```'
        assert extract_recommendation(reply) is None

    def test_bare_object_when_marker_present(self):
        reply = 'My pick: {"recommendedProducts": [{"name": "Wheel Cleaner"}], "reasoning": "Safe"} Enjoy!'

        recommendation = extract_recommendation(reply)

        assert recommendation.recommended_products[0].product_title == "Wheel Cleaner"
        assert recommendation.reasoning == "Safe"

    def test_no_json_yields_none(self):
        assert extract_recommendation("Rinse the car first, then wash top to bottom.") is None

    def test_braces_without_marker_yield_none(self):
        assert extract_recommendation("Use {soap} and water.") is None

    def test_missing_priority_defaults_to_one(self):
        reply = '```json\n{"recommendedProducts": [{"productTitle": "Tire Shine", "reason": "gloss"}]}\n```'

        recommendation = extract_recommendation(reply)

        assert recommendation.recommended_products[0].priority == 1

    def test_invalid_json_yields_none(self):
        reply = '```json\n{"recommendedProducts": [ {"productTitle": }\n```'
        assert extract_recommendation(reply) is None

    def test_tagged_fence_wins_over_bare_object(self):
        reply = (
            '{"recommendedProducts": [{"title": "Bare"}]}\n'
            '```json\n{"recommendedProducts": [{"title": "Fenced"}]}\n```'
        )
        recommendation = extract_recommendation(reply)
        assert recommendation.recommended_products[0].product_title == "Fenced"

    def test_brace_inside_string_breaks_bare_object(self):
        reply = 'Here: {"recommendedProducts": [{"title": "Wax }"}]}'
        assert extract_recommendation(reply) is None

    def test_empty_text(self):
        assert extract_recommendation("") is None
        assert extract_recommendation(None) is None


class TestDecodeRecommendation:
    def test_title_keys_tried_in_order(self):
        recommendation = decode_recommendation(
            '{"recommendedProducts": [{"name": "Second", "product_title": "First"}]}'
        )
        assert recommendation.recommended_products[0].product_title == "First"

    def test_non_string_title_falls_through(self):
        recommendation = decode_recommendation(
            '{"recommendedProducts": [{"productTitle": 5, "productName": "Fallback"}]}'
        )
        assert recommendation.recommended_products[0].product_title == "Fallback"

    def test_defaults_for_empty_item(self):
        recommendation = decode_recommendation('{"recommendedProducts": [{}]}')
        item = recommendation.recommended_products[0]
        assert item.product_title == UNKNOWN_PRODUCT
        assert item.priority == 1
        assert item.reason == DEFAULT_REASON

    @pytest.mark.parametrize("priority", ['"2"', "true", "1.5", "null"])
    def test_non_integer_priority_defaults(self, priority):
        recommendation = decode_recommendation(
            '{"recommendedProducts": [{"title": "X", "priority": %s}]}' % priority
        )
        assert recommendation.recommended_products[0].priority == 1

    def test_integral_float_priority_accepted(self):
        recommendation = decode_recommendation('{"recommendedProducts": [{"title": "X", "priority": 3.0}]}')
        assert recommendation.recommended_products[0].priority == 3

    def test_non_string_goal_is_dropped(self):
        recommendation = decode_recommendation('{"recommendedProducts": [], "customerGoal": 7}')
        assert recommendation.customer_goal is None
        assert recommendation.recommended_products == ()

    @pytest.mark.parametrize("document", [
        "[1, 2]",
        '{"products": []}',
        '{"recommendedProducts": "Wax"}',
        '{"recommendedProducts": ["Wax"]}',
        "not json",
    ])
    def test_malformed_documents(self, document):
        with pytest.raises(MalformedPayload):
            decode_recommendation(document)


class TestLocating:
    def test_unbalanced_object_runs_to_end(self):
        match = find_balanced_object('prefix {"a": {"b": 1}')
        assert match.content == '{"a": {"b": 1}'

    def test_no_brace(self):
        assert find_balanced_object("nothing here") is None

    def test_unclosed_tagged_fence_falls_back_to_bare_object(self):
        reply = 'Look ```json {"recommendedProducts": []}'
        assert locate_payload(reply) == '{"recommendedProducts": []}'


class TestCleanMessageForDisplay:
    def test_round_trip_display_text(self):
        assert clean_message_for_display(ROUND_TRIP_REPLY) == "Here you go:"

    def test_text_without_json_is_unchanged(self):
        text = "  Rinse first, then dry with a microfiber towel.  "
        assert clean_message_for_display(text) == text

    def test_untagged_block_with_brace_removed(self):
        reply = 'Tips below.\n```\n{"steps": 3}\n```\nThanks!'
        assert clean_message_for_display(reply) == "Tips below.\n\nThanks!"

    def test_untagged_block_without_json_kept(self):
        reply = "Run:\n```\nrinse, wash, dry\n```"
        assert clean_message_for_display(reply) == reply

    def test_bare_object_removed(self):
        reply = 'My pick: {"recommendedProducts": [{"title": "Tire Shine"}]} Enjoy!'
        assert clean_message_for_display(reply) == "My pick:  Enjoy!"

    def test_bare_object_without_marker_kept(self):
        reply = "Use {soap} and water."
        assert clean_message_for_display(reply) == reply
