# Route handlers package
