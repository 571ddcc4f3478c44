"""
Prompt templates
"""

# ========== Message rewrite ==========

CONTENT_BLOCKED_MARKER = "[CONTENT_BLOCKED]"

VIBE_INSTRUCTIONS = {
    "warm": "Make it warm, heartfelt, and sincere. Use gentle, comforting language.",
    "funny": "Make it lighthearted, playful, and humorous. Add wit and charm.",
    "fancy": "Make it elegant, sophisticated, and refined. Use polished, formal language.",
    "chaotic": "Make it energetic, wild, and fun. Use bold, enthusiastic language.",
}

MESSAGE_REWRITE_PROMPT = """You are a holiday card message writer. Rewrite the following message to be {vibe_instruction} The message is for {occasion}.

Preserve the user's intent and meaning. Improve clarity and grammar. Avoid clichés and unsafe content.

IMPORTANT SAFETY RULES:
- Do not include any personal information (emails, phone numbers, addresses)
- Do not include hate speech, harassment, or threats
- Do not include defamatory statements about individuals
- If the message violates these rules, respond with only: "{blocked_marker}"
- Output ONLY the rewritten message as plain text, no quotes or formatting

Original message: {message}

Rewritten message:"""


# ========== Cover image ==========

VIBE_IMAGE_DESCRIPTIONS = {
    "warm": "warm, cozy, inviting atmosphere with soft lighting",
    "funny": "playful, whimsical, lighthearted scene",
    "fancy": "elegant, sophisticated, refined composition",
    "chaotic": "energetic, vibrant, dynamic scene",
}

COVER_IMAGE_PROMPT = """Create a {vibe_description} holiday card cover image for {occasion}.

Requirements:
- Clean composition with good use of negative space
- Festive imagery aligned with {occasion} theme
- NO TEXT OR WORDS in the image
- High quality, suitable for social sharing
- Professional illustration style"""
