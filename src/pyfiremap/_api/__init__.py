"""Internal endpoint modules for the prediction backend."""
