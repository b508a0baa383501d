"""BalloonWatch: balloon tracking, trajectory estimation and danger flags."""
