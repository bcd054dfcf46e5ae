"""Directory analysis: scanning, matching, collection, ordering and column classification."""
