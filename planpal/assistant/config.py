# config.py
import os

# Model provider: any OpenAI-compatible endpoint (OpenAI, Groq, ...)
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL") or None
MODEL_NAME = os.getenv("PLANPAL_MODEL", "gpt-4o-mini")
TEMPERATURE = float(os.getenv("PLANPAL_TEMPERATURE", 0.7))

# Upstream call policy
REQUEST_TIMEOUT_SECONDS = float(os.getenv("REQUEST_TIMEOUT_SECONDS", 30))
MAX_RETRIES = int(os.getenv("MAX_RETRIES", 0))

# Session history: "memory" or "redis"
SESSION_BACKEND = os.getenv("SESSION_BACKEND", "memory").lower()

# Redis config
REDIS_URL = os.getenv("REDIS_URL", "redis://redis:6379/0")
REDIS_PREFIX = os.getenv("REDIS_PREFIX", "planpal")
SESSION_TTL_SECONDS = int(os.getenv("REDIS_TTL", 3600))

# History limits
MAX_HISTORY_MESSAGES = int(os.getenv("MAX_HISTORY_MESSAGES", 50))
TOKEN_LIMIT = int(os.getenv("TOKEN_LIMIT", 6000))
SUMMARY_TOKEN_LIMIT = int(os.getenv("SUMMARY_TOKEN_LIMIT", TOKEN_LIMIT // 4))

# Idle in-memory sessions and chat logs expire after this many seconds
MEMORY_SESSION_TTL_SECONDS = int(os.getenv("MEMORY_SESSION_TTL", 3600))

SUGGESTION_KEYWORDS = ("suggest", "recommend", "idea")

FALLBACK_TEXT = (
    "Oh no! I'm having a little trouble thinking right now. "
    "Please try again in a moment. 🙏"
)

PERSONA = (
    "You are 'PlanPal', a cheerful and energetic AI assistant for planning events with friends, "
    "with a charming Indian cultural twist. Your tone is always encouraging and friendly, "
    "like a helpful friend.\n"
    "- Use Hinglish phrases occasionally (e.g., 'Chalo, let's plan!', 'Kya idea hai!', 'Masti time!').\n"
    "- Use emojis generously to keep the vibe fun and lighthearted 🎉🍛🎬.\n"
    "- When asked for suggestions for places, movies, or activities, you MUST respond ONLY with JSON "
    "that strictly follows the provided schema. Do not add any text before or after the JSON.\n"
    "- If the suggestion is a Movie, provide a plausible 'posterUrl'.\n"
    "- If the suggestion is a Restaurant or Hangout Spot, provide a plausible 'address'.\n"
    "- If the user provides their location coordinates, use them to make your suggestions "
    "more relevant and localized.\n"
    "- For all other conversational queries, respond with a helpful, friendly text message.\n"
    "- If the user asks for suggestions based on a mood (e.g., chill, adventurous, foodie), "
    "tailor your JSON suggestions to match that mood.\n"
    "- Keep your text responses concise and to the point."
)
