"""
Reply assembly and delivery.

``dialog``
    Walks reply chains into the dialog submitted to the model.
``generation``
    Language-model client over OpenAI / Ollama.
``renderer``
    Progress placeholder, chunked delivery and error replies.
``formatting``
    Input mention rewriting and output normalization.
"""
