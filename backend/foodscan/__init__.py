"""
FoodScan API
Resolves scanned barcodes to food products with a health score and warnings.
"""
