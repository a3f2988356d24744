"""Analysis core: pattern engine, document sessions and editor features"""
