"""
Static keyword tables, canned responses and suggestion cards.

Everything here is built once at import time and treated as read-only:
tuples and frozensets only. Classifier and suggestion engine receive these by
reference through their constructors.
"""
from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Tuple

from models import SuggestionCard


class Category(str, Enum):
    DISTRESS = "distress"
    TECHNICAL = "technical"
    GENERAL_KNOWLEDGE = "general_knowledge"


@dataclass(frozen=True)
class ClassifierRule:
    category: Category
    keywords: FrozenSet[str]
    response: str


@dataclass(frozen=True)
class TopicRule:
    tag: str
    keywords: FrozenSet[str]
    cards: Tuple[SuggestionCard, ...]


# --------------- Classifier ---------------

DISTRESS_KEYWORDS = frozenset([
    "suicide", "suicidal", "kill myself", "killing myself", "want to die",
    "wanna die", "end my life", "ending my life", "end it all", "self harm",
    "self-harm", "hurt myself", "harm myself", "cut myself", "no reason to live",
    "better off dead", "can't go on", "cannot go on", "don't want to live",
    "don't want to be alive", "take my own life",
])

TECHNICAL_KEYWORDS = frozenset([
    "python", "javascript", "typescript", "java", "c++", "html", "css", "sql",
    "code", "coding", "programming", "function", "algorithm", "debug",
    "compile", "software", "database", "github", "stack trace", "syntax error",
    "regex", "linux", "docker",
])

GENERAL_KNOWLEDGE_KEYWORDS = frozenset([
    "capital of", "who invented", "who discovered", "history of", "population of",
    "weather", "recipe", "stock price", "exchange rate", "sports score",
    "who won", "how far is", "how tall is", "translate", "calculate",
    "solve this equation", "what year did", "president of",
])

CRISIS_RESPONSE = (
    "I'm really concerned about what you've shared, and I'm so glad you told me. "
    "You don't have to carry this alone. Please reach out right now to the "
    "Suicide & Crisis Lifeline by calling or texting 988, or text HOME to 741741 "
    "to reach a trained crisis counselor. If you are in immediate danger, "
    "please call 911. Your life matters. 💚"
)

TECHNICAL_RESPONSE = (
    "I'm your wellness companion, so I can't help with technical or programming "
    "questions. If a project has been weighing on you, I'd be glad to talk about "
    "how you're feeling. What's on your mind? 🌱"
)

GENERAL_KNOWLEDGE_RESPONSE = (
    "That's outside what I can help with. I'm here to support your emotional "
    "wellbeing rather than answer general knowledge questions. How are you "
    "feeling today? 🌿"
)

CLASSIFIER_RULES: Tuple[ClassifierRule, ...] = (
    ClassifierRule(Category.DISTRESS, DISTRESS_KEYWORDS, CRISIS_RESPONSE),
    ClassifierRule(Category.TECHNICAL, TECHNICAL_KEYWORDS, TECHNICAL_RESPONSE),
    ClassifierRule(Category.GENERAL_KNOWLEDGE, GENERAL_KNOWLEDGE_KEYWORDS, GENERAL_KNOWLEDGE_RESPONSE),
)

# --------------- Suggestions ---------------

CRISIS_CARDS: Tuple[SuggestionCard, ...] = (
    SuggestionCard(title="Call 988 Lifeline", icon="📞", target="tel:988",
                   description="Free, confidential support 24/7"),
    SuggestionCard(title="Crisis Text Line", icon="💬", target="https://www.crisistextline.org/",
                   description="Text HOME to 741741"),
    SuggestionCard(title="Emergency Services", icon="🚨", target="tel:911",
                   description="If you are in immediate danger"),
)

MEDITATION = "/meditation"
SOUND = "/sound"
MUDRA = "/mudra"
MENTOR = "/mentor"

TOPIC_RULES: Tuple[TopicRule, ...] = (
    TopicRule("sadness", frozenset([
        "sad", "depressed", "depression", "unhappy", "crying", "cried", "heartbroken",
        "grief", "grieving", "hopeless", "miserable", "down lately",
    ]), (
        SuggestionCard(title="Loving-Kindness Meditation", icon="💗", target=MEDITATION,
                       description="Gentle practice to soften heavy feelings"),
        SuggestionCard(title="Healing Sounds", icon="🎵", target=SOUND,
                       description="Soothing tones for emotional release"),
        SuggestionCard(title="Talk to a Mentor", icon="🙏", target=MENTOR,
                       description="Share what you're carrying with a guide"),
    )),
    TopicRule("anxiety", frozenset([
        "anxious", "anxiety", "stress", "overwhelmed", "panic", "worried", "worry",
        "nervous", "pressure", "tense", "restless",
    ]), (
        SuggestionCard(title="Guided Breathing", icon="🧘", target=MEDITATION,
                       description="5-minute breathing meditation to reduce stress"),
        SuggestionCard(title="Calming Sounds", icon="🌊", target=SOUND,
                       description="Ocean waves and rain for a quieter mind"),
        SuggestionCard(title="Apana Mudra", icon="🤲", target=MUDRA,
                       description="Grounding hand gesture for anxious moments"),
    )),
    TopicRule("anger", frozenset([
        "angry", "my anger", "furious", "frustrated", "frustration", "irritated",
        "annoyed", "enraged", "resentment",
    ]), (
        SuggestionCard(title="Cooling Breath", icon="❄️", target=MEDITATION,
                       description="Sheetali breathing to release heat"),
        SuggestionCard(title="Prana Mudra", icon="🤲", target=MUDRA,
                       description="Hand gesture to restore balance"),
        SuggestionCard(title="Grounding Sounds", icon="🥁", target=SOUND,
                       description="Steady rhythms to settle the body"),
    )),
    TopicRule("fatigue", frozenset([
        "tired", "exhausted", "exhaustion", "fatigue", "sleepy", "insomnia",
        "can't sleep", "burnout", "burned out", "drained", "no energy",
    ]), (
        SuggestionCard(title="Sleep Sounds", icon="🌙", target=SOUND,
                       description="Soft soundscapes for deep rest"),
        SuggestionCard(title="Body Scan", icon="🛌", target=MEDITATION,
                       description="Release tension before sleep"),
        SuggestionCard(title="Energizing Mudra", icon="⚡", target=MUDRA,
                       description="Prana mudra to restore vitality"),
    )),
    TopicRule("focus", frozenset([
        "focus", "concentrate", "concentration", "distracted", "procrastinate",
        "procrastinating", "attention", "exams", "my exam", "study", "studying",
    ]), (
        SuggestionCard(title="Gyan Mudra", icon="👌", target=MUDRA,
                       description="Hand gesture for enhanced concentration"),
        SuggestionCard(title="Focus Meditation", icon="🎯", target=MEDITATION,
                       description="Single-point attention practice"),
        SuggestionCard(title="Binaural Focus", icon="🎧", target=SOUND,
                       description="Sound frequencies for deep work"),
    )),
    TopicRule("gratitude", frozenset([
        "grateful", "gratitude", "thankful", "blessed", "appreciate", "happy",
        "joy", "joyful",
    ]), (
        SuggestionCard(title="Gratitude Meditation", icon="🌸", target=MEDITATION,
                       description="Savor what is going well"),
        SuggestionCard(title="Uplifting Sounds", icon="🎶", target=SOUND,
                       description="Bright tones to celebrate the moment"),
        SuggestionCard(title="Lotus Mudra", icon="🪷", target=MUDRA,
                       description="Open-heart gesture of appreciation"),
    )),
    TopicRule("loneliness", frozenset([
        "lonely", "loneliness", "alone", "isolated", "no friends", "nobody cares",
        "left out", "abandoned",
    ]), (
        SuggestionCard(title="Talk to a Mentor", icon="🙏", target=MENTOR,
                       description="Connect with a caring wellness guide"),
        SuggestionCard(title="Compassion Meditation", icon="💞", target=MEDITATION,
                       description="Feel connected to others"),
        SuggestionCard(title="Heart Mudra", icon="🫶", target=MUDRA,
                       description="Hridaya mudra for warmth and connection"),
    )),
)

# --------------- Fixed turns ---------------

WELCOME_TEXT = (
    "Welcome to Zen Chat! I'm here to guide you on your wellness journey. "
    "How are you feeling today?"
)

WELCOME_CARDS: Tuple[SuggestionCard, ...] = (
    SuggestionCard(title="Try Meditation", icon="🧘", target=MEDITATION,
                   description="Guided mindfulness session"),
    SuggestionCard(title="Practice Mudra", icon="🙏", target=MUDRA,
                   description="Hand positions for focus"),
    SuggestionCard(title="Sound Healing", icon="🎵", target=SOUND,
                   description="Therapeutic sound therapy"),
    SuggestionCard(title="Talk to Mentor", icon="👨‍🏫", target=MENTOR,
                   description="Connect with a wellness guide"),
)

WELCOME_BACK_TEXT = (
    "Welcome back to Zen Chat! I'm glad you're here again. "
    "How are you feeling today?"
)

WELLNESS_RETURN_TEXT = (
    "Welcome back! How was your {session_type} session? "
    "Did it help you feel calmer and more centered?"
)

WELLNESS_PAGES = frozenset(["meditation", "sound", "mudra", "mentor"])

APOLOGY_TEXT = (
    "I'm having trouble connecting right now. Please take a slow, deep breath "
    "and try again in a moment. 🌱"
)

INTERRUPTED_TEXT = (
    "Our connection was interrupted. Take a moment to breathe, and feel free "
    "to send your message again. 🍃"
)

TIMEOUT_TEXT = (
    "This is taking longer than expected. Let's pause for a breath together, "
    "then please try sending your message again. 🌿"
)

SYSTEM_DIRECTIVE = (
    "You are Zen Chat, a compassionate wellness companion rooted in mindfulness, "
    "meditation and ancient wisdom traditions. Respond with deep empathy, gentle "
    "non-judgmental language and brief answers (2-3 sentences). "
    "Hard constraints: only discuss emotional wellbeing, mindfulness, stress, "
    "relationships and self-care. Never answer technical, programming, coding or "
    "general-knowledge questions; kindly redirect the user to how they are feeling "
    "instead. Never give medical diagnoses. If the user mentions self-harm or "
    "suicide, urge them to contact the 988 Suicide & Crisis Lifeline or emergency "
    "services immediately."
)
