"""Hard limits shared by the guardrails and exposed through settings."""

# Slack's own limit for chat.postMessage text, in characters.
MAX_MESSAGE_LENGTH = 40_000

# Longest accepted channel / name / mention reference.
MAX_CHANNEL_NAME_LENGTH = 80

# A well-formed thread timestamp is 17 characters; this is only a secondary cap.
MAX_THREAD_TS_LENGTH = 32
