"""Pure computational libraries: fixed-point numerics and risk tools."""
