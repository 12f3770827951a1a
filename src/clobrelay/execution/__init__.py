"""Trade execution: pricing, order building, retry and submission."""
