"""
Service layer: AI pipeline, OCR, document import, export and usage gate.
"""
