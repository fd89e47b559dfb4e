# apps/blogs/models.py
from django.db import models


# Site ---------------------------------------------------------------------------------------------
class Site(models.Model):
    """
    An external site that embeds the widget.
    Registration and token issuance live outside this service; only the rows are kept here.
    """
    name = models.CharField(max_length=255, verbose_name='Name')
    domain = models.CharField(max_length=255, verbose_name='Domain')
    token = models.CharField(max_length=64, unique=True, verbose_name='Token')

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.domain

    class Meta:
        verbose_name = "Site"
        verbose_name_plural = "Sites"


# Blog ---------------------------------------------------------------------------------------------
class Blog(models.Model):
    site = models.ForeignKey(Site, on_delete=models.CASCADE, related_name='blogs')
    url = models.CharField(max_length=255, verbose_name='Relative URL')

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f'{self.site_id}:{self.url}'

    class Meta:
        verbose_name = "Blog"
        verbose_name_plural = "Blogs"
        constraints = [
            models.UniqueConstraint(fields=['site', 'url'], name='uniq_blog_site_url'),
        ]


# Comment ------------------------------------------------------------------------------------------
class Comment(models.Model):
    blog = models.ForeignKey(Blog, on_delete=models.CASCADE, related_name='comments')
    parent = models.ForeignKey(
        'self',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='replies',
    )
    name = models.CharField(max_length=255)
    email = models.EmailField(max_length=255, null=True, blank=True)
    body = models.TextField()

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f'{self.name}: {self.body[:30]}'

    class Meta:
        verbose_name = "Comment"
        verbose_name_plural = "Comments"
        indexes = [
            models.Index(fields=['blog', 'parent'], name='comment_blog_parent_idx'),
        ]
