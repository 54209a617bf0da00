EXTRACTION_PROMPT = """
Extract structured data from this document. Identify key fields like names, dates,
numbers, addresses, and any other relevant information that might be needed for a form.

Respond with JSON only, shaped as:
{"extracted_fields": [{"key": "...", "value": "...", "confidence": 0.0}],
 "document_type": "...", "summary": "..."}
confidence is your certainty between 0 and 1.
"""
