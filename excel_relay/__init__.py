"""
Excel Relay - thin HTTP relay in front of the Groq chat-completion API.

Handles single messages, vision messages, multi-turn conversations and
spreadsheet prompts answered with a JSON action list.
"""

__version__ = "1.0.0"
