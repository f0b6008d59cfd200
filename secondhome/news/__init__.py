"""
Housing and education news for the blog page, pulled from NewsAPI or GNews.
"""
