"""Transport scaffolds shared by vds entry points."""
