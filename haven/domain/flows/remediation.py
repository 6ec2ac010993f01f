"""
Authentication remediation decision

Pure mapping from the user's menu choice to what the connect flow does
next. Terminal prompting stays in the flow.
"""
from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple


class RemediationAction(str, Enum):
    GENERATE_MANAGED_KEY = "generate-managed-key"
    SHOW_EXISTING_KEYS = "show-existing-keys"
    AGENT_GUIDANCE = "agent-guidance"


@dataclass(frozen=True)
class RemediationDecision:
    action: RemediationAction
    retry: bool


def remediation_options(has_existing_keys: bool) -> List[Tuple[str, RemediationAction, str]]:
    """Menu entries as (choice, action, description)"""
    options = [
        ("1", RemediationAction.GENERATE_MANAGED_KEY,
         "Generate a Haven key (one-time setup, no passphrase, works everywhere)"),
    ]
    if has_existing_keys:
        options.append(
            ("2", RemediationAction.SHOW_EXISTING_KEYS,
             "Use an existing key (if you have a passphrase-less key ready)")
        )
    options.append(
        (str(len(options) + 1), RemediationAction.AGENT_GUIDANCE,
         "Set up ssh-agent (if your keys require a passphrase)")
    )
    return options


def decide_remediation(choice: str, has_existing_keys: bool) -> RemediationDecision:
    """
    Decide the remediation branch.

    Args:
        choice: Raw menu input ("1", "2", ...)
        has_existing_keys: Whether pre-existing user keys can be offered

    Returns:
        The action to take and whether the probe is retried afterwards.
        Anything unrecognised falls through to agent guidance, which never
        retries.
    """
    choice = choice.strip()
    if choice == "1":
        return RemediationDecision(RemediationAction.GENERATE_MANAGED_KEY, retry=True)
    if has_existing_keys and choice == "2":
        return RemediationDecision(RemediationAction.SHOW_EXISTING_KEYS, retry=True)
    return RemediationDecision(RemediationAction.AGENT_GUIDANCE, retry=False)
