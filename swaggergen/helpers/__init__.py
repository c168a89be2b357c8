"""Building blocks used by `swaggergen.generator` to assemble a document."""
