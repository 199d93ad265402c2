AESTHETIC = """\
As an aesthetic validator, focus on visual appeal and composition. {prompt}

Evaluate visual quality, composition, and aesthetic appeal."""
