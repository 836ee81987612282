import json
import logging
import os
from datetime import date
from typing import List, Optional

from claude_agent_sdk import query, ClaudeAgentOptions, AssistantMessage, TextBlock

from pacer.errors import NotConfigured
from pacer.schemas import ChatMessage, TrainingPlan, UserSettingsData
from pacer.services.pace import target_pace
from pacer.services.race_countdown import days_to_race

logger = logging.getLogger(__name__)

HELP_MESSAGE = "\n".join([
    "I'm your AI training coach! I can help you create a personalized marathon training plan "
    "and update it directly. Try asking me things like:",
    "",
    "• \"Create a 16-week training plan to break 3 hours\"",
    "• \"Change Tuesday's workout to 10 miles at tempo pace\"",
    "• \"Make Saturday a 20-mile long run\"",
    "• \"Update week 2 with more rest days\"",
])


def build_system_prompt(settings: UserSettingsData, plan: TrainingPlan, today: Optional[date] = None) -> str:
    """Coaching instructions with the runner's details and current plan."""
    if settings.race_date:
        race = f"{settings.race_date} ({days_to_race(settings.race_date, today)} days away)"
    else:
        race = "not set"

    plan_json = json.dumps(
        {week: [w.model_dump(mode="json") for w in workouts] for week, workouts in plan.items()},
        indent=2,
    )
    weeks = sorted(plan)
    weeks_label = f"Weeks {weeks[0]}-{weeks[-1]}" if weeks else "empty"

    return f"""You are an expert marathon training coach helping a runner prepare for their marathon.

Runner Details:
- Target finish time: {settings.target_time}
- Race date: {race}
- Current body weight: {settings.body_weight} lbs
- Target pace: {target_pace(settings.target_time)} per mile
- Current training week: {settings.current_week} of {settings.total_training_weeks}

Current Training Plan ({weeks_label}):
{plan_json}

Your role is to:
1. Create personalized training plans
2. Provide expert coaching advice
3. Update the training plan when requested

When the user asks you to modify their training plan:
1. First, provide your coaching advice and explain the changes
2. Then, at the END of your response, include the updates in this EXACT format on separate lines:
UPDATE: Week [number], [Day], [Type], [Miles], [Pace]

Example:
UPDATE: Week 1, Tuesday, Tempo, 10, 7:00
UPDATE: Week 1, Saturday, Long Run, 20, 7:45

Important:
- Use workout types: Easy, Tempo, Intervals, Long Run, Recovery, Rest
- Always include all 5 fields even if some don't change
- Put UPDATE lines at the very end
- Be conversational and supportive in your coaching"""


def render_conversation(history: List[ChatMessage]) -> str:
    """Flatten the conversation, newest message last, into a single prompt."""
    lines = []
    for turn in history:
        speaker = "Coach" if turn.role == "assistant" else "Runner"
        lines.append(f"{speaker}: {turn.content}")
    return "\n\n".join(lines)


class CoachService:
    def __init__(self, oauth_token: Optional[str] = None, model: str = "sonnet"):
        """Initialize the coach with a Claude Code OAuth token

        The claude-agent-sdk reads CLAUDE_CODE_OAUTH_TOKEN from the
        environment, so an explicit token is exported there.
        """
        if oauth_token:
            os.environ["CLAUDE_CODE_OAUTH_TOKEN"] = oauth_token

        if not os.getenv("CLAUDE_CODE_OAUTH_TOKEN"):
            raise NotConfigured("CLAUDE_CODE_OAUTH_TOKEN is required")

        self.model = model
        logger.info(f"Initialized coach service with model: {self.model}")

    async def send(self, history: List[ChatMessage], system_prompt: str) -> str:
        """
        Ask the coach for its next message.

        Args:
            history: The conversation, oldest first, ending with the
                runner's new message
            system_prompt: Output of build_system_prompt()

        Returns:
            The coach's raw reply, UPDATE lines included, or HELP_MESSAGE
            if the model could not be reached
        """
        prompt = render_conversation(history)

        try:
            options = ClaudeAgentOptions(
                model=self.model,
                max_turns=1,
                allowed_tools=[],
                system_prompt=system_prompt,
            )

            reply_text = ""
            async for msg in query(prompt=prompt, options=options):
                if isinstance(msg, AssistantMessage):
                    for block in msg.content:
                        if isinstance(block, TextBlock):
                            reply_text += block.text

            reply_text = reply_text.strip()
            logger.info(f"Coach replied with {len(reply_text)} chars")
            return reply_text or HELP_MESSAGE

        except Exception as e:
            logger.error(f"Coach request failed: {e}")
            return HELP_MESSAGE
