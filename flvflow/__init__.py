"""flvflow: streaming FLV container decoding and encoding."""
