"""ragchat: ingest text documents and answer questions about them.

Documents are split into paragraph sections, embedded, and stored in
SQLite; questions are answered by retrieving the most similar sections
and handing them to a language model as context.
"""

__version__ = "0.1.0"
