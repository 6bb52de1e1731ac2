"""RINSR admin gateway: proxy and dashboard logic for the RINSR admin panel."""
