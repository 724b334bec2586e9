"""Tools a model can be asked to use: page scraping, DuckDuckGo search and stock quotes."""