"""
Boundary layer: everything that talks to storage or a remote model.

db holds the relational records (notes, ingestion runs, user sessions),
vdb the derived FAISS vector index keyed by note id, llm the embedding and
generation clients. timeouts bounds every outbound call.
"""
