"""
app/indexing package marker.
"""

from app.indexing.elasticsearch_bulk import BulkSubmitter, ElasticsearchBulkSubmitter, daily_index_name

__all__ = ["BulkSubmitter", "ElasticsearchBulkSubmitter", "daily_index_name"]
