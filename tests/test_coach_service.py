import pytest
import os
from datetime import date
from unittest.mock import patch
from claude_agent_sdk import AssistantMessage, TextBlock

from pacer.errors import NotConfigured
from pacer.schemas import ChatMessage, UserSettingsData
from pacer.services.coach_service import (
    HELP_MESSAGE,
    CoachService,
    build_system_prompt,
    render_conversation,
)
from pacer.services.plan_defaults import default_training_plan


@pytest.mark.asyncio
async def test_send_collects_text_blocks():
    """Reply text is the concatenation of the assistant's text blocks"""
    service = CoachService(oauth_token="test-token")

    with patch('pacer.services.coach_service.query') as mock_query:
        mock_message = AssistantMessage(
            content=[TextBlock(text="Run easy tomorrow.\n"), TextBlock(text="UPDATE: Week 1, Tuesday, Easy, 4, 8:30")],
            model="sonnet"
        )

        async def mock_async_iter():
            yield mock_message

        mock_query.return_value = mock_async_iter()

        reply = await service.send([ChatMessage(role="user", content="I'm tired")], "system")

        assert reply == "Run easy tomorrow.\nUPDATE: Week 1, Tuesday, Easy, 4, 8:30"
        options = mock_query.call_args[1]["options"]
        assert options.system_prompt == "system"
        assert options.model == "sonnet"


@pytest.mark.asyncio
async def test_send_api_error_returns_help():
    """Errors from the SDK fall back to the help message"""
    service = CoachService(oauth_token="test-token")

    with patch('pacer.services.coach_service.query') as mock_query:
        async def mock_error_iter():
            raise Exception("API Error")
            yield  # Make it a generator

        mock_query.return_value = mock_error_iter()

        reply = await service.send([ChatMessage(role="user", content="hi")], "system")

        assert reply == HELP_MESSAGE


def test_missing_oauth_token():
    """Missing token means the coach is not configured"""
    old_token = os.environ.pop("CLAUDE_CODE_OAUTH_TOKEN", None)
    try:
        with pytest.raises(NotConfigured, match="CLAUDE_CODE_OAUTH_TOKEN is required"):
            CoachService()
    finally:
        if old_token:
            os.environ["CLAUDE_CODE_OAUTH_TOKEN"] = old_token


def test_system_prompt_includes_runner_details():
    settings = UserSettingsData(body_weight=155, target_time="3:10:00", race_date="2025-05-25")
    prompt = build_system_prompt(settings, default_training_plan(), date(2025, 5, 1))

    assert "Target finish time: 3:10:00" in prompt
    assert "Race date: 2025-05-25 (24 days away)" in prompt
    assert "Current body weight: 155 lbs" in prompt
    assert "Target pace: 7:15 per mile" in prompt
    assert "Current Training Plan (Weeks 1-2)" in prompt
    assert "UPDATE: Week [number], [Day], [Type], [Miles], [Pace]" in prompt
    assert '"Long Run"' in prompt


def test_system_prompt_without_race_date():
    prompt = build_system_prompt(UserSettingsData(), default_training_plan())
    assert "Race date: not set" in prompt


def test_render_conversation():
    history = [
        ChatMessage(role="user", content="Plan my week"),
        ChatMessage(role="assistant", content="Sure"),
        ChatMessage(role="user", content="Thanks"),
    ]
    assert render_conversation(history) == "Runner: Plan my week\n\nCoach: Sure\n\nRunner: Thanks"
