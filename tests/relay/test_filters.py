import pytest

from onion_bot.relay.filters import exceeds_input_limit, is_emoji_only, is_translatable


@pytest.mark.parametrize(
    "text",
    [
        "hello",
        "Bonjour tout le monde",
        "こんにちは",
        "Привет",
        "42",
        "ok 👍",
        "  padded text  ",
        "see https://example.com for details",
        "<@999> hello",
    ],
)
def test_accepts_language(text):
    assert is_translatable(text)


@pytest.mark.parametrize(
    "text",
    [
        "",
        "   \n\t",
        "https://example.com/some/path",
        "HTTP://EXAMPLE.COM",
        "😀",
        "😀😂🎉",
        "👍🏽",
        "\U0001F468\u200d\U0001F469\u200d\U0001F467",
        "🇫🇷",
        "\u2764\ufe0f",
        "1\ufe0f\u20e3",
        "(╯°□°)╯︵ ┻━┻",
        "!!!???",
        "…",
        "「」",
        "<@999>",
        "<@!999> <#12> <@&34>",
    ],
)
def test_rejects_non_language(text):
    assert not is_translatable(text)


def test_long_decorative_run_needs_alnum():
    decorative = "!?" * 10
    assert not is_translatable(decorative)
    assert is_translatable(decorative + " hi")


def test_emoji_only_ignores_whitespace():
    assert is_emoji_only("😀 😀\n🎉")
    assert not is_emoji_only("😀 a")


def test_input_limit_is_inclusive():
    assert not exceeds_input_limit("a" * 2999, 3000)
    assert exceeds_input_limit("a" * 3000, 3000)
    assert exceeds_input_limit("a" * 3050, 3000)
