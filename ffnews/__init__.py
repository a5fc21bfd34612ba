"""Economic-calendar ingestion and snapshot contract for ff-news."""
