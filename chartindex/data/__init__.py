"""
Serialization of the chart index.

This package is responsible for:
* Encoding the in-memory index as an index.yaml document.
* Decoding index.yaml documents (including ones written by other tools)
  back into the index models.
"""
