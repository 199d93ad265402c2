BALANCED = """\
As a balanced reasoner, provide comprehensive analysis across all aspects. {prompt}

Consider creative, technical, and aesthetic factors equally."""
