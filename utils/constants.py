"""
Constants and system prompts for the LLM Chat Bridge application.
"""

DEFAULT_SYSTEM_PROMPT = """You are a helpful AI assistant. Answer clearly and conversationally.
Use markdown formatting when it makes the answer easier to read."""

# Appended to the system prompt when web search is enabled
WIKIPEDIA_CONTEXT_PROMPT = """
The following information was retrieved from Wikipedia just now for the user's latest question.
Use it to ground your answer and cite sources with their numbers, e.g. [1].
---
{wikipedia_results}
---"""

IMPROVE_TEXT_SYSTEM_PROMPT = (
    "You are a prompt engineering expert. Your task is to improve the user's text to make it "
    "clearer, more specific and better structured so that an AI model gives better answers. "
    "Reply only with the improved version of the prompt, without explanations or other text."
)

# For models that ignore the system role, the instructions are inlined
IMPROVE_TEXT_INLINE_PROMPT = (
    "You are a prompt engineering expert. Your task is to improve the text I will send you to "
    "make it clearer, more specific and better structured. Reply only with the improved version "
    "of the prompt, without explanations or other text. Here is the text to improve: \"{text}\""
)

KEYWORD_EXTRACTION_PROMPT = """
Analyze the following text and extract 2-4 main keywords to search on Wikipedia for the best results.
Return ONLY a JSON array of strings, without additional text.
Example output: ["keyword1", "keyword2", "keyword3"]

TEXT: "{text}"
"""

TITLE_PROMPT = (
    "Create a very short title (maximum 3 words) for this message without using quotes "
    "or text formatting: \"{message}\""
)

WIKIPEDIA_NO_RESULTS = "No results found on Wikipedia for this search."
WIKIPEDIA_UNAVAILABLE = "Web search failed: service temporarily unavailable."


class Patterns:
    """Regular expression patterns."""
    THINK_BLOCK = r'<think>[\s\S]*?</think>'
    THINK_TAG = r'</?think>'
    TRAILING_UNDEFINED = r'\s*undefined\s*$'
    JSON_ARRAY = r'\[[\s\S]*?\]'
    KEYWORD_SPLIT = r'[,\n]'
    SURROUNDING_QUOTES = r'^[\'"`]|[\'"`]$'
    # A hashtag phrase runs over following words that start with a capital or digit
    HASHTAG = r'#([\wÀ-ÿ]+(?:[ \t]+[A-Z0-9À-Þ][\wÀ-ÿ]*)*)'
    PUNCTUATION = r'[^\w\s]'
