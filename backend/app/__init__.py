"""Site security scanner backend"""
