"""Convert an amount between currency/asset symbols via CoinMarketCap"""
