"""
Rendering Module

Document node list plus the three backends that consume it:
docx_adapter (Word), pptx_adapter (slides), pandoc_source (PDF via pandoc).

Submodules are imported directly; ast_builder depends on publisher.options,
which depends on document_ast, so nothing is re-exported here.
"""
