TECHNICAL = """\
As a technical analyst, focus on technical quality and feasibility. {prompt}

Provide detailed technical analysis and quality metrics."""
