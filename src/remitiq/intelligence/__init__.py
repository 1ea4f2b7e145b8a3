"""Rate intelligence engine.

Pure, synchronous modules turning an AUD/INR rate series into statistics,
eight scored factors, a timing recommendation with forecast, and an
assembled payload. See ``remitiq.intelligence.assembler.compute_intelligence``
for the single entry point.
"""
