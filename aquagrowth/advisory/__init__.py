"""Advisory: prose assessment of a batch's metrics from a text-generation service.

- prompt.py: builds the specialist prompt from computed metrics
- gemini_client.py: request/response shapes and the httpx call
"""
