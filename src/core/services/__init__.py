# Pure analytics policies shared by the ingestion component:
# pageview duplicate suppression and device classification.
