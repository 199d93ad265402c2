CREATIVE = """\
As a creative AI specialist, focus on innovative and artistic aspects. {prompt}

Emphasize creativity, originality, and artistic value in your response."""
