"""
Layer retrieval and ingestion.

Raw features come from a local dataset (`local`) or the BC Data
Catalogue (`catalog`); `ingestor` turns them into normalized layers.
"""
